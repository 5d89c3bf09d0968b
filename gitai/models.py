#!/usr/bin/env python3

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field

ChangeType = Literal["add", "remove", "context"]
FileStatus = Literal["added", "modified", "deleted", "renamed"]
CommandName = Literal["commit", "gh", "changelog"]


@dataclass(frozen=True)
class DiffChange:
    """A single line inside a hunk."""
    type: ChangeType
    content: str
    line_number: int


@dataclass(frozen=True)
class DiffHunk:
    """One @@ block of a file diff."""
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    changes: List[DiffChange] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedFileDiff:
    """Data class for a changed file in a diff."""
    file_path: str
    old_path: Optional[str]
    status: FileStatus
    hunks: List[DiffHunk] = field(default_factory=list)


@dataclass(frozen=True)
class GitCommit:
    """Data class for a commit read from git log."""
    hash: str
    short_hash: str
    subject: str
    body: str
    author: str
    date: str


@dataclass(frozen=True)
class PrComment:
    id: int
    body: str


@dataclass(frozen=True)
class PrDetailsResult:
    """Title and rendered markdown body ready to be pushed to a PR."""
    title: str
    body: str


# Structured LLM output

class CommitMessage(BaseModel):
    message: str = Field(..., description="The commit message")


class PrTitle(BaseModel):
    title: str = Field(..., description="The PR title")


class FileSummary(BaseModel):
    file: str = Field(..., description="The file path")
    description: str = Field(..., description="A one-sentence summary of the changes in the file")


class PrDetails(BaseModel):
    title: str = Field(..., description="The PR title")
    description: str = Field(..., description="The PR description")
    fileSummaries: List[FileSummary] = Field(..., description="One summary per changed file")


class ReviewItem(BaseModel):
    file: str = Field(..., description="The file path for the comment")
    line: int = Field(..., description="The line number for the comment")
    category: str = Field(..., description="The category of the feedback (e.g., 'Security', 'Bug', 'Optimization', 'Improvement')")
    comment: str = Field(..., description="The review comment")
    codeSnippet: str = Field(..., description="The relevant code snippet")


class PrReviewDetails(BaseModel):
    review: List[ReviewItem] = Field(..., description="All review comments")


class Changelog(BaseModel):
    changelog: str = Field(..., description="The changelog in markdown format")


# Config files

class RulesConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    targetFile: Optional[str] = None


class LocalConfig(BaseModel):
    """Schema of .gitai/config.json."""
    model_config = ConfigDict(extra="forbid")

    defaultModel: Optional[str] = None
    rules: Optional[RulesConfig] = None


class Preferences(BaseModel):
    """Schema of the per-user preferences file."""
    model_config = ConfigDict(extra="forbid")

    lastUsedModelByCommand: Dict[CommandName, str] = Field(default_factory=dict)
    modelUsageCounts: Dict[str, int] = Field(default_factory=dict)
