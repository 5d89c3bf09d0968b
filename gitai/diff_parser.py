#!/usr/bin/env python3

"""
Parses unified diff output into structured data and renders it for LLM prompts.

Models tend to misread the +/- prefixes of a unified diff, so the rendered form
spells out ADDED/REMOVED/CONTEXT blocks together with their line ranges.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from gitai.models import DiffChange, DiffHunk, ParsedFileDiff, FileStatus

HUNK_HEADER_PATTERN = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@')
FILE_SEPARATOR_PATTERN = re.compile(r'^diff --git ', re.MULTILINE)
FILE_SEPARATOR = 'diff --git '
BINARY_MARKER = 'Binary files'
DEV_NULL = '/dev/null'

_UNSET = object()


@dataclass(frozen=True)
class _HunkCursor:
    """Line counters of the hunk being scanned. Every line yields a new cursor."""
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    old_line_num: int
    new_line_num: int

    @classmethod
    def from_header(cls, match: 're.Match') -> '_HunkCursor':
        old_start = int(match.group(1))
        new_start = int(match.group(3))
        return cls(
            old_start=old_start,
            old_lines=int(match.group(2) or 1),
            new_start=new_start,
            new_lines=int(match.group(4) or 1),
            old_line_num=old_start,
            new_line_num=new_start,
        )

    def advance(self, line: str) -> Tuple['_HunkCursor', Optional[DiffChange]]:
        """
        Consumes one hunk body line.

        Args:
            line: Raw diff line

        Returns:
            The next cursor and the change the line describes, if any
        """
        if line.startswith('+'):
            change = DiffChange('add', line[1:], self.new_line_num)
            return self._moved(0, 1), change

        if line.startswith('-'):
            change = DiffChange('remove', line[1:], self.old_line_num)
            return self._moved(1, 0), change

        if line.startswith(' ') or line == '':
            content = line[1:] if line.startswith(' ') else line
            change = DiffChange('context', content, self.new_line_num)
            return self._moved(1, 1), change

        return self, None

    def to_hunk(self, changes: List[DiffChange]) -> DiffHunk:
        return DiffHunk(self.old_start, self.old_lines, self.new_start, self.new_lines, changes)

    def _moved(self, old_step: int, new_step: int) -> '_HunkCursor':
        return _HunkCursor(
            self.old_start,
            self.old_lines,
            self.new_start,
            self.new_lines,
            self.old_line_num + old_step,
            self.new_line_num + new_step,
        )


class DiffParser:
    """Parser for Git diff output."""

    @staticmethod
    def parse_diff(raw_diff: str) -> List[ParsedFileDiff]:
        """
        Parses the diff string and returns a structured format.

        Binary files and chunks without an identifiable path are skipped.

        Args:
            raw_diff: Output of `git diff` or the PR diff endpoint

        Returns:
            List of ParsedFileDiff objects in diff order
        """
        if not raw_diff.strip():
            return []

        files = []
        for chunk in FILE_SEPARATOR_PATTERN.split(raw_diff):
            if not chunk.strip():
                continue
            parsed = DiffParser._parse_file_diff(FILE_SEPARATOR + chunk)
            if parsed is not None:
                files.append(parsed)

        return files

    @staticmethod
    def format_diff_for_llm(diffs: List[ParsedFileDiff]) -> str:
        """
        Renders parsed file diffs as ADDED/REMOVED/CONTEXT blocks.

        Args:
            diffs: Parsed file diffs

        Returns:
            The formatted text, or an empty string when there is nothing to show
        """
        if not diffs:
            return ''
        return '\n\n'.join(DiffParser._format_file_diff(diff) for diff in diffs)

    @staticmethod
    def transform_diff_for_llm(raw_diff: str) -> str:
        """Parses and formats a raw diff in one step."""
        return DiffParser.format_diff_for_llm(DiffParser.parse_diff(raw_diff))

    @staticmethod
    def _parse_file_diff(chunk: str) -> Optional[ParsedFileDiff]:
        lines = chunk.split('\n')

        if any(BINARY_MARKER in line for line in lines):
            return None

        old_path, new_path = DiffParser._parse_file_paths(lines)
        if old_path is None and new_path is None:
            return None

        status = DiffParser._determine_status(old_path, new_path)
        return ParsedFileDiff(
            file_path=new_path if new_path is not None else old_path,
            old_path=old_path if status == 'renamed' else None,
            status=status,
            hunks=DiffParser._parse_hunks(lines),
        )

    @staticmethod
    def _parse_file_paths(lines: List[str]) -> Tuple[Optional[str], Optional[str]]:
        old_path = _UNSET
        new_path = _UNSET

        for line in lines:
            if line.startswith('--- '):
                path = line[4:].strip()
                old_path = None if path == DEV_NULL else re.sub(r'^a/', '', path)
            elif line.startswith('+++ '):
                path = line[4:].strip()
                new_path = None if path == DEV_NULL else re.sub(r'^b/', '', path)
            if old_path is not _UNSET and new_path is not _UNSET:
                break

        return (
            None if old_path is _UNSET else old_path,
            None if new_path is _UNSET else new_path,
        )

    @staticmethod
    def _determine_status(old_path: Optional[str], new_path: Optional[str]) -> FileStatus:
        if old_path is None and new_path is not None:
            return 'added'
        if old_path is not None and new_path is None:
            return 'deleted'
        if old_path is not None and new_path is not None and old_path != new_path:
            return 'renamed'
        return 'modified'

    @staticmethod
    def _parse_hunks(lines: List[str]) -> List[DiffHunk]:
        hunks = []
        # None until the first hunk header; file metadata lines are skipped
        cursor: Optional[_HunkCursor] = None
        changes: List[DiffChange] = []

        for line in lines:
            match = HUNK_HEADER_PATTERN.match(line)
            if match:
                if cursor is not None:
                    hunks.append(cursor.to_hunk(changes))
                cursor = _HunkCursor.from_header(match)
                changes = []
                continue

            if cursor is None:
                continue

            cursor, change = cursor.advance(line)
            if change is not None:
                changes.append(change)

        if cursor is not None:
            hunks.append(cursor.to_hunk(changes))

        return hunks

    @staticmethod
    def _group_consecutive_changes(changes: List[DiffChange]) -> List[Tuple[str, List[DiffChange]]]:
        groups: List[Tuple[str, List[DiffChange]]] = []

        for change in changes:
            if groups and groups[-1][0] == change.type:
                groups[-1][1].append(change)
            else:
                groups.append((change.type, [change]))

        return groups

    @staticmethod
    def _format_line_range(changes: List[DiffChange]) -> str:
        if not changes:
            return ''

        first = changes[0].line_number
        last = changes[-1].line_number
        if len(changes) == 1 or first == last:
            return f"line {first}"
        return f"lines {first}-{last}"

    @staticmethod
    def _format_hunk(hunk: DiffHunk) -> str:
        parts = []

        for change_type, group in DiffParser._group_consecutive_changes(hunk.changes):
            line_range = DiffParser._format_line_range(group)
            content = '\n'.join(change.content for change in group)

            if change_type == 'remove':
                parts.append(f"--- REMOVED ({line_range}) ---\n{content}")
            elif change_type == 'add':
                parts.append(f"+++ ADDED ({line_range}) +++\n{content}")
            else:
                parts.append(f"~~~ CONTEXT ({line_range}) ~~~\n{content}")

        return '\n\n'.join(parts)

    @staticmethod
    def _format_file_diff(diff: ParsedFileDiff) -> str:
        if diff.status == 'renamed' and diff.old_path:
            status_label = f"renamed from {diff.old_path}"
        else:
            status_label = diff.status

        header = f"=== FILE: {diff.file_path} ({status_label}) ==="
        hunks = '\n\n'.join(DiffParser._format_hunk(hunk) for hunk in diff.hunks)
        footer = "=== END FILE ==="

        return f"{header}\n\n{hunks}\n\n{footer}"


parse_diff = DiffParser.parse_diff
format_diff_for_llm = DiffParser.format_diff_for_llm
transform_diff_for_llm = DiffParser.transform_diff_for_llm
