#!/usr/bin/env python3

import fnmatch
import re
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional, Type, TypeVar

from pydantic import BaseModel

from gitai.diff_parser import DiffParser, FILE_SEPARATOR, FILE_SEPARATOR_PATTERN
from gitai.exceptions import GenerationError
from gitai.generators import prompts
from gitai.logger import get_logger
from gitai.models import (
    Changelog,
    CommitMessage,
    GitCommit,
    PrDetails,
    PrDetailsResult,
    PrReviewDetails,
    PrTitle,
)

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

REVIEW_TAG_URL = "https://github.com/lucas-barake/gitai"

# Generated and vendored files only add noise to a prompt
DEFAULT_EXCLUDE_PATTERNS = [
    "*.lock",
    "*.lockb",
    "*-lock.json",
    "*-lock.yaml",
    "coverage/*",
    "*/coverage/*",
    "dist/*",
    "*/dist/*",
    "build/*",
    "*/build/*",
    ".next/*",
    "*/.next/*",
]

_DIFF_GIT_PATHS = re.compile(r'^a/(?P<old>.+?) b/(?P<new>.+)$')


def make_review_comment_tag(username: str) -> str:
    """Marker embedded in review comments so a user's previous review can be found again."""
    return f"<!-- [gitai-review:{username}]({REVIEW_TAG_URL}) -->"


def _chunk_path(chunk: str) -> str:
    first_line = chunk.split("\n", 1)[0].strip()
    match = _DIFF_GIT_PATHS.match(first_line)
    if match:
        return match.group("new")
    return first_line


def filter_diff(raw_diff: str, exclude_patterns: Optional[List[str]] = None) -> str:
    """
    Removes the file sections whose path matches one of the exclude patterns.

    Args:
        raw_diff: Unified diff text
        exclude_patterns: fnmatch patterns; DEFAULT_EXCLUDE_PATTERNS when omitted

    Returns:
        The diff without the excluded file sections
    """
    if exclude_patterns is None:
        exclude_patterns = DEFAULT_EXCLUDE_PATTERNS

    kept = []
    for index, chunk in enumerate(FILE_SEPARATOR_PATTERN.split(raw_diff)):
        if not chunk.strip():
            continue
        if index == 0 and not raw_diff.startswith(FILE_SEPARATOR):
            # text before the first file section
            kept.append(chunk)
            continue

        path = _chunk_path(chunk)
        if any(fnmatch.fnmatch(path, pattern) for pattern in exclude_patterns):
            logger.debug(f"Excluding file from prompt: {path}")
            continue
        kept.append(FILE_SEPARATOR + chunk)

    return "".join(kept)


def format_pr_description(details: PrDetails) -> str:
    file_summaries = "\n".join(
        f"| {summary.file} | {summary.description} |" for summary in details.fileSummaries
    )

    return f"""{details.description}

<details>
<summary>Show a summary per file</summary>

| File | Description |
| ---- | ----------- |
{file_summaries}
</details>"""


def format_review_as_markdown(review: PrReviewDetails, username: str) -> str:
    review_items = "\n\n".join(
        f"**{item.file}:{item.line}**\n* [{item.category}] {item.comment}\n```\n{item.codeSnippet}\n```"
        for item in review.review
    )

    return (
        f"{make_review_comment_tag(username)}\n"
        f"<details>\n<summary>Review</summary>\n\n{review_items}\n</details>"
    )


class BaseGenerator(ABC):
    """
    Base class for all content generators.
    Subclasses only implement _generate, the call to a concrete model backend.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.name = self.__class__.__name__
        self.context: Optional[str] = config.get("context")
        self.exclude_patterns = DEFAULT_EXCLUDE_PATTERNS + list(config.get("exclude_patterns", []))

    @abstractmethod
    def _generate(self, prompt: str, schema: Type[T]) -> T:
        """
        Sends a prompt to the model and parses the answer.

        Args:
            prompt: Complete prompt text
            schema: Pydantic model describing the expected JSON answer

        Returns:
            An instance of schema
        """
        pass

    def prepare_diff(self, raw_diff: str) -> str:
        """Filters the diff and renders it in the ADDED/REMOVED/CONTEXT form."""
        filtered = filter_diff(raw_diff, self.exclude_patterns)
        formatted = DiffParser.transform_diff_for_llm(filtered)
        return formatted or filtered

    def generate_commit_message(self, diff: str) -> str:
        prompt = prompts.make_commit_message_prompt(self.prepare_diff(diff), self.context)
        return self._run("commit message", prompt, CommitMessage).message

    def generate_title(self, diff: str) -> str:
        prompt = prompts.make_title_prompt(self.prepare_diff(diff), self.context)
        return self._run("PR title", prompt, PrTitle).title

    def generate_pr_details(self, diff: str) -> PrDetailsResult:
        prompt = prompts.make_pr_details_prompt(self.prepare_diff(diff), self.context)
        details = self._run("PR details", prompt, PrDetails)
        return PrDetailsResult(title=details.title, body=format_pr_description(details))

    def generate_review(self, diff: str, username: str) -> str:
        prompt = prompts.make_review_prompt(self.prepare_diff(diff), self.context)
        review = self._run("review", prompt, PrReviewDetails)
        return format_review_as_markdown(review, username)

    def generate_changelog(self, commits: List[GitCommit]) -> str:
        prompt = prompts.make_changelog_prompt(commits, self.context)
        return self._run("changelog", prompt, Changelog).changelog

    def _run(self, what: str, prompt: str, schema: Type[T]) -> T:
        logger.debug(f"{self.name} generating {what} ({len(prompt)} prompt characters)")
        try:
            return self._generate(prompt, schema)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Failed to generate {what}: {e}") from e
