#!/usr/bin/env python3

from typing import List, Optional

from gitai.models import GitCommit

TITLE_GUIDELINES = """- Follow the Conventional Commits specification: `type(scope): subject`.
  - `type`: one of feat, fix, improvement, refactor, perf, docs, style, test, build, ci, ops, chore, revert, security, deprecate.
  - `scope` (optional): the most specific feature or area touched, derived from the file paths in the diff.
  - `subject`: a short summary in the imperative mood of the most impactful change, kept under 72 characters."""

DIFF_FORMAT_NOTE = """The diff is rendered per file between `=== FILE: ... ===` and `=== END FILE ===` markers.
Inside a file, `--- REMOVED (lines N-M) ---` blocks hold removed lines numbered in the old file,
`+++ ADDED (lines N-M) +++` blocks hold added lines numbered in the new file and
`~~~ CONTEXT ~~~` blocks hold unchanged lines numbered in the new file."""


def make_context_snippet(context: Optional[str]) -> str:
    if not context:
        return ""
    return f"""
## User-Provided Context

The user has offered the following context. Use it to guide the response:

> {context}
"""


def make_commit_message_prompt(diff: str, context: Optional[str] = None) -> str:
    """Creates the prompt for a Conventional Commits message."""
    return f"""You are a senior software engineer writing a git commit message for the staged changes below.
{make_context_snippet(context)}
## Format

```
<type>[optional scope]: <description>

[optional body]

[optional footer(s)]
```

- The subject line uses the imperative mood, starts lowercase and does not end with a period.
- Pick the type from the primary intent of the change: feat, fix, improvement, docs, style, refactor, perf, test, build, ci, ops, chore, revert, security or deprecate.
- The body, separated by one blank line, explains why the change was needed. Wrap it at 72 characters.
- Signal breaking changes with a `BREAKING CHANGE: ` footer or a `!` after the type.
- Do not use emojis.

## Output (JSON)
A single object with one key, "message", holding the complete commit message.

{DIFF_FORMAT_NOTE}

Analyze the following diff and generate the commit message:
{diff}"""


def make_title_prompt(diff: str, context: Optional[str] = None) -> str:
    return f"""You are a software engineer naming a pull request.
{make_context_snippet(context)}
## Format
{TITLE_GUIDELINES}

## Constraints
- Professional and direct, no emojis.
- No redundant phrases like "This PR" or "This commit".

## Output (JSON)
- title: the PR title.

{DIFF_FORMAT_NOTE}

Analyze the following diff and generate the PR title:
{diff}"""


def make_pr_details_prompt(diff: str, context: Optional[str] = None) -> str:
    return f"""You are a software engineer writing the title and description of a pull request. The description will become the squashed commit message.
{make_context_snippet(context)}
## Format
{TITLE_GUIDELINES}

### Description
- Open with a short paragraph on why the change is needed.
- Follow with a `Changes:` list grouping related changes by feature, not by file.
- End with a `How to Test / What to Expect` section describing the behaviour before and after.

## Constraints
- Professional and direct, no emojis.
- No redundant phrases like "This PR" or "This commit".

## Output (JSON)
- title: the PR title.
- description: the description including the `Changes:` list.
- fileSummaries: one object per changed file with `file` (the path) and `description` (a one-sentence summary).

{DIFF_FORMAT_NOTE}

Analyze the following diff and generate the PR title, description and file summaries:
{diff}"""


def make_review_prompt(diff: str, context: Optional[str] = None) -> str:
    """Creates the prompt for a review posted as a single PR comment."""
    return f"""You are an expert code reviewer. Review the pull request diff below.
{make_context_snippet(context)}
## Review Focus
- Security vulnerabilities
- Bugs and logical errors
- Performance and efficiency
- Code structure, readability and maintainability

## Constraints
- No praise. Only constructive, actionable feedback.
- Only comment where there is a clear issue. Return an empty list otherwise.
- Use the new-file line numbers shown in the ADDED and CONTEXT blocks.

## Output (JSON)
- review: a list of items with `file`, `line`, `category` (e.g. 'Security', 'Bug', 'Optimization', 'Improvement'), `comment` and `codeSnippet`.

{DIFF_FORMAT_NOTE}

Analyze the following diff and generate the review:
{diff}"""


def format_commits_for_prompt(commits: List[GitCommit]) -> str:
    blocks = []
    for commit in commits:
        body = f"\n\n{commit.body}" if commit.body else ""
        blocks.append(
            f"**Commit {commit.short_hash}** ({commit.date})\n"
            f"Author: {commit.author}\n"
            f"Subject: {commit.subject}{body}\n"
            f"\n---"
        )
    return "\n\n".join(blocks)


def make_changelog_prompt(commits: List[GitCommit], context: Optional[str] = None) -> str:
    return f"""You are a technical writer producing a changelog for an unreleased batch of commits.
{make_context_snippet(context)}
## Structure
- Group changes by feature or area of the codebase, not by commit type. Use `#` headers for areas.
- Inside an area, use a blockquote (`>`) as the feature subheading followed by one paragraph on the user value.
- Add a "**How to Test:**" list under testable features.
- Always finish with an "# Under the Hood" section for internal changes.

## Content
- Describe the end result. Merge commits that touch the same feature and drop superseded approaches.
- Describe what users can see and do. Do not mention class, function or library names.
- Leave out pure refactors, test changes and CI changes unless users notice them.
- No emojis.

## Output (JSON)
- changelog: the complete changelog in markdown.

## Commit History

{format_commits_for_prompt(commits)}"""
