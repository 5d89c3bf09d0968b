#!/usr/bin/env python3

"""
Exceptions raised by the gitai orchestration layer.

The diff parser never raises; everything that talks to git, GitHub or the
model provider reports failures through these types so that main() can print
a single line and exit non-zero.
"""

from typing import List, Optional


class GitAiError(Exception):
    """Base class for all gitai errors."""


class CommandError(GitAiError):
    """Raised when an external command (git, gh) fails.

    Attributes:
        message: Explanation of the error
        command: The argv that was executed
        exit_code: Process exit code, if the process started at all
        stderr: Captured standard error
    """

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ):
        self.message = message
        self.command = command or []
        self.exit_code = exit_code
        self.stderr = stderr

        details = []
        if exit_code is not None:
            details.append(f"exit_code={exit_code}")
        if stderr.strip():
            details.append(f"stderr={stderr.strip()}")

        full_message = message
        if details:
            full_message = f"{message} ({', '.join(details)})"
        super().__init__(full_message)


class GitHubError(GitAiError):
    """Raised when a GitHub API call fails."""


class GenerationError(GitAiError):
    """Raised when the language model call or its output parsing fails."""


class ConfigError(GitAiError):
    """Raised for unusable configuration, e.g. missing credentials."""
