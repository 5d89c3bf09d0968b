#!/usr/bin/env python3

import json
from typing import List, Optional

import requests
from github import Github, GithubException

from gitai.exceptions import CommandError, GitHubError
from gitai.logger import get_logger
from gitai.models import PrComment
from gitai.shell import run_command

logger = get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"


class GitHubClient:
    """Handles all interactions with GitHub API."""

    def __init__(self, github_token: str, timeout: int = 30):
        """
        Initialize GitHub client with authentication token.

        Args:
            github_token: GitHub authentication token
            timeout: Timeout in seconds for raw API requests
        """
        self.github_token = github_token
        self.timeout = timeout
        self.gh = Github(github_token)

    @classmethod
    def from_gh_cli(cls) -> "GitHubClient":
        """Builds a client from the token of the logged-in `gh` user."""
        token = run_command(
            ["gh", "auth", "token"],
            "Failed to read GitHub token. Is `gh` installed and are you logged in?",
        ).strip()
        return cls(token)

    @staticmethod
    def get_local_repo() -> str:
        """
        Detects the repository of the current working directory.

        Returns:
            Repository name in owner/repo form
        """
        error_message = "Failed to detect repository. Are you inside a Git repository directory?"
        output = run_command(["gh", "repo", "view", "--json", "nameWithOwner"], error_message)

        try:
            return json.loads(output)["nameWithOwner"]
        except (ValueError, KeyError, TypeError) as e:
            raise CommandError(f"{error_message} ({e})") from e

    def get_pr_diff(self, pr_number: int, repo: str) -> str:
        """
        Fetches the diff of the pull request from GitHub API.

        Args:
            pr_number: Pull request number
            repo: Repository in owner/repo form

        Returns:
            String containing the trimmed diff
        """
        api_url = f"{GITHUB_API_URL}/repos/{repo}/pulls/{pr_number}"
        headers = {
            'Authorization': f'Bearer {self.github_token}',
            'Accept': 'application/vnd.github.v3.diff'
        }

        try:
            response = requests.get(api_url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise GitHubError(f"Failed to fetch PR diff: {e}") from e

        if response.status_code != 200:
            logger.debug(f"Response content: {response.text}")
            raise GitHubError(
                f"Failed to fetch PR diff for {repo}#{pr_number}. Status code: {response.status_code}"
            )

        diff = response.text or ""
        logger.debug(f"Retrieved diff length: {len(diff)}")
        return diff.strip()

    def update_pr(
            self,
            pr_number: int,
            repo: str,
            title: Optional[str] = None,
            body: Optional[str] = None,
    ) -> None:
        """
        Updates the title and/or body of a pull request. Omitted fields are left untouched.

        Args:
            pr_number: Pull request number
            repo: Repository in owner/repo form
            title: New title
            body: New body
        """
        fields = {}
        if title:
            fields["title"] = title
        if body:
            fields["body"] = body
        if not fields:
            return

        try:
            self._get_pull(pr_number, repo).edit(**fields)
        except GithubException as e:
            raise GitHubError(f"Failed to update PR #{pr_number}: {e}") from e

    def list_pr_comments(self, pr_number: int, repo: str) -> List[PrComment]:
        try:
            comments = self._get_pull(pr_number, repo).get_issue_comments()
            return [PrComment(comment.id, comment.body or "") for comment in comments]
        except GithubException as e:
            logger.warning(f"Failed to list comments for PR #{pr_number}: {e}")
            return []

    def add_pr_comment(self, pr_number: int, repo: str, body: str) -> None:
        try:
            self._get_pull(pr_number, repo).create_issue_comment(body)
        except GithubException as e:
            raise GitHubError(f"Failed to add comment to PR #{pr_number}: {e}") from e

    def delete_pr_comment(self, pr_number: int, repo: str, comment_id: int) -> None:
        """Deletes a PR comment. A comment that is already gone only produces a warning."""
        try:
            self._get_pull(pr_number, repo).get_issue_comment(comment_id).delete()
        except GithubException as e:
            logger.warning(f"Could not delete comment {comment_id}. It might have been already deleted. ({e})")

    def _get_pull(self, pr_number: int, repo: str):
        return self.gh.get_repo(repo).get_pull(int(pr_number))
