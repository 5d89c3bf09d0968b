#!/usr/bin/env python3

import subprocess
from typing import List

from gitai.exceptions import CommandError
from gitai.logger import get_logger

logger = get_logger(__name__)


def run_command(args: List[str], error_message: str) -> str:
    """
    Runs an external command and returns its standard output.

    Args:
        args: Command and arguments, e.g. ["git", "diff"]
        error_message: Message used when the command cannot run or exits non-zero

    Returns:
        Captured standard output

    Raises:
        CommandError: If the executable is missing or exits with a non-zero code
    """
    logger.debug(f"Running: {' '.join(args)}")
    try:
        result = subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
    except OSError as e:
        raise CommandError(f"{error_message}: {e}", command=args) from e

    if result.returncode != 0:
        raise CommandError(
            error_message,
            command=args,
            exit_code=result.returncode,
            stderr=result.stderr or "",
        )

    return result.stdout or ""
