#!/usr/bin/env python3

from typing import List

from gitai.exceptions import CommandError
from gitai.logger import get_logger
from gitai.models import GitCommit
from gitai.shell import run_command

logger = get_logger(__name__)

COMMIT_END_MARKER = "---COMMIT-END---"
LOG_FORMAT = f"--format=%H%n%h%n%s%n%b%n%an%n%ad%n{COMMIT_END_MARKER}"
UNKNOWN_USER = "unknown-user"


class GitClient:
    """Handles all interactions with the local git executable."""

    def get_staged_diff(self, context_lines: int = 3) -> str:
        """
        Returns the diff of the staged changes.

        Args:
            context_lines: Number of context lines around each change

        Returns:
            The trimmed diff, empty when nothing is staged
        """
        diff = run_command(
            ["git", "diff", "--staged", f"-U{context_lines}"],
            "Failed to get staged diff. Is git installed?",
        )
        return diff.strip()

    def commit(self, message: str) -> None:
        run_command(["git", "commit", "-m", message], "Failed to commit")

    def get_commit_range(self, from_hash: str, to_hash: str = "HEAD") -> List[GitCommit]:
        """
        Lists the commits reachable from to_hash but not from from_hash.

        Args:
            from_hash: Exclusive start of the range
            to_hash: Inclusive end of the range

        Returns:
            Commits newest first, as git log prints them
        """
        output = run_command(
            ["git", "log", LOG_FORMAT, "--date=iso", f"{from_hash}..{to_hash}"],
            f"Failed to get commit range {from_hash}..{to_hash}. Check if commits exist.",
        )
        return self.parse_log_output(output)

    def get_all_commits(self, limit: int = 50) -> List[GitCommit]:
        output = run_command(
            ["git", "log", LOG_FORMAT, "--date=iso", f"-n{limit}"],
            "Failed to get commit history. Is git installed?",
        )
        return self.parse_log_output(output)

    def get_username(self) -> str:
        """Returns the configured git user name, or a placeholder if it is not set."""
        try:
            name = run_command(["git", "config", "user.name"], "Failed to get git username").strip()
        except CommandError as e:
            logger.warning(f"{e}; falling back to '{UNKNOWN_USER}'")
            return UNKNOWN_USER
        return name or UNKNOWN_USER

    @staticmethod
    def parse_log_output(output: str) -> List[GitCommit]:
        """
        Parses `git log` output produced with LOG_FORMAT.

        Each record is hash, short hash, subject, body (any number of lines),
        author and date, terminated by COMMIT_END_MARKER.
        """
        if not output.strip():
            return []

        commits = []
        for chunk in output.split(COMMIT_END_MARKER):
            if not chunk.strip():
                continue

            lines = chunk.strip().split("\n")
            commits.append(GitCommit(
                hash=lines[0] if len(lines) > 0 else "",
                short_hash=lines[1] if len(lines) > 1 else "",
                subject=lines[2] if len(lines) > 2 else "",
                body="\n".join(lines[3:-2]).strip(),
                author=lines[-2] if len(lines) >= 2 else "",
                date=lines[-1] if lines else "",
            ))

        return commits
