#!/usr/bin/env python3

from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from gitai.logger import get_logger
from gitai.models import CommandName, Preferences

logger = get_logger(__name__)

PREFERENCES_PATH = Path(".config") / "gitai" / "preferences.json"


class UserPreferences:
    """Remembers which model the user picked, per command, across runs."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or Path.home() / PREFERENCES_PATH

    def load(self) -> Preferences:
        """Reads the preferences file. A missing or invalid file yields empty preferences."""
        try:
            return Preferences.model_validate_json(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Preferences()
        except (OSError, ValidationError) as e:
            logger.debug(f"Ignoring unreadable preferences at {self.path}: {e}")
            return Preferences()

    def save(self, preferences: Preferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(preferences.model_dump_json(indent=2), encoding="utf-8")

    def last_used_model(self, command: CommandName) -> Optional[str]:
        return self.load().lastUsedModelByCommand.get(command)

    def record_model_usage(self, command: CommandName, model: str) -> None:
        """
        Stores model as the last one used for command and bumps its usage count.

        Args:
            command: Sub-command name
            model: Model identifier
        """
        preferences = self.load()

        last_used = dict(preferences.lastUsedModelByCommand)
        last_used[command] = model
        counts = dict(preferences.modelUsageCounts)
        counts[model] = counts.get(model, 0) + 1

        try:
            self.save(Preferences(lastUsedModelByCommand=last_used, modelUsageCounts=counts))
        except OSError as e:
            logger.warning(f"Failed to save preferences to {self.path}: {e}")
