#!/usr/bin/env python3

import os
from pathlib import Path
from typing import Dict, Any, List, Optional

from pydantic import ValidationError

from gitai.logger import get_logger
from gitai.models import CommandName, LocalConfig
from gitai.preferences import UserPreferences

logger = get_logger(__name__)

GITAI_DIR = Path(".gitai")
LOCAL_CONFIG_PATH = GITAI_DIR / "config.json"
FALLBACK_MODEL = "gpt-4o"


def parse_patterns(raw: str) -> List[str]:
    if not raw or not raw.strip():
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def load_local_config(path: Path = LOCAL_CONFIG_PATH) -> LocalConfig:
    """
    Reads the repository-level .gitai/config.json.

    Args:
        path: Location of the config file

    Returns:
        The validated config, or an empty one when the file is missing or invalid
    """
    try:
        return LocalConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return LocalConfig()
    except (OSError, ValidationError) as e:
        logger.warning(f"[LocalConfig]: Failed to read config: {e}")
        return LocalConfig()


def load_config(local_config_path: Path = LOCAL_CONFIG_PATH) -> Dict[str, Any]:
    """
    Loads configuration from environment variables and the local config file.

    Returns:
        Dict containing configuration values
    """
    local_config = load_local_config(local_config_path)

    config = {
        # GitHub configuration
        "github_token": os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN"),

        # General configuration
        "exclude_patterns": parse_patterns(os.environ.get("GITAI_EXCLUDE", "")),
        "default_model": local_config.defaultModel,
        "env_model": os.environ.get("GITAI_MODEL"),
        "rules_target_file": local_config.rules.targetFile if local_config.rules else None,

        # OpenAI configuration
        "openai_api_key": os.environ.get("OPENAI_API_KEY"),
        "openai_base_url": os.environ.get("OPENAI_BASE_URL"),

        # Azure OpenAI configuration
        "azure_openai_endpoint": os.environ.get("AZURE_OPENAI_ENDPOINT"),
        "azure_openai_key": os.environ.get("AZURE_OPENAI_KEY"),
        "azure_openai_api_version": os.environ.get("AZURE_OPENAI_API_VERSION"),
    }

    return config


def resolve_model(
        command: CommandName,
        cli_model: Optional[str],
        config: Dict[str, Any],
        preferences: UserPreferences,
) -> str:
    """
    Picks the model for a command.

    Precedence: --model flag, defaultModel in .gitai/config.json, the model last
    used for the same command, GITAI_MODEL, then FALLBACK_MODEL.
    """
    return (
        cli_model
        or config.get("default_model")
        or preferences.last_used_model(command)
        or config.get("env_model")
        or FALLBACK_MODEL
    )
