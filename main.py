#!/usr/bin/env python3

import argparse
import json
import sys
import traceback
from dataclasses import asdict
from typing import Dict, Any, List, Optional

from config import GITAI_DIR, load_config, resolve_model
from gitai import __version__
from gitai.exceptions import GitAiError
from gitai.generators import AIGenerator
from gitai.generators.base_generator import make_review_comment_tag
from gitai.git_client import GitClient
from gitai.github_client import GitHubClient
from gitai.logger import configure_logging, get_logger
from gitai.models import CommandName
from gitai.preferences import UserPreferences

logger = get_logger("main")

RULES_DIR = GITAI_DIR / "rules"
DEFAULT_RULES_TARGET = "CLAUDE.local.md"


def confirm(message: str, assume_yes: bool = False) -> bool:
    if assume_yes:
        return True
    answer = input(f"{message} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def get_generator(
        config: Dict[str, Any],
        command: CommandName,
        cli_model: Optional[str],
        context: Optional[str],
) -> AIGenerator:
    """
    Initialize the generator for a command, resolving and recording the model.

    Args:
        config: Configuration dictionary
        command: Sub-command the generator is used by
        cli_model: Model passed with --model, if any
        context: Extra context passed with --context, if any

    Returns:
        Generator instance
    """
    preferences = UserPreferences()
    model = resolve_model(command, cli_model, config, preferences)
    logger.info(f"Using model: {model}")

    generator = AIGenerator({**config, "model": model, "context": context})
    preferences.record_model_usage(command, model)
    return generator


def get_github_client(config: Dict[str, Any]) -> GitHubClient:
    if config.get("github_token"):
        return GitHubClient(config["github_token"])
    return GitHubClient.from_gh_cli()


def run_commit(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    git = GitClient()

    diff = git.get_staged_diff(args.context_lines)
    if not diff:
        logger.info("No staged changes found. Nothing to commit.")
        return 0

    generator = get_generator(config, "commit", args.model, args.context)
    message = generator.generate_commit_message(diff)
    logger.info(f"\nGenerated commit message:\n\n{message}\n")

    if confirm("Would you like to commit with this message?", args.yes):
        git.commit(message)
        logger.info("Successfully committed changes!")
    return 0


def run_gh(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    github = get_github_client(config)

    repo = args.repo
    if not repo:
        logger.info("Detecting current repository...")
        repo = github.get_local_repo()
    logger.info(f"Using repository: {repo}")

    logger.info(f"Fetching diff for PR #{args.pr}...")
    diff = github.get_pr_diff(args.pr, repo)
    if not diff:
        logger.info("PR diff is empty. Nothing to generate.")
        return 0

    generator = get_generator(config, "gh", args.model, args.context)

    if args.action == "details":
        logger.info(f"Generating PR title and description for PR #{args.pr}...")
        details = generator.generate_pr_details(diff)
        logger.info(f"Generated PR details:\n{json.dumps(asdict(details), indent=2)}")

        if confirm(f"Update PR #{args.pr} with this title and description?", args.yes):
            github.update_pr(args.pr, repo, title=details.title, body=details.body)
            logger.info(f"Successfully updated PR #{args.pr} on GitHub!")

    elif args.action == "title":
        logger.info("Generating PR title...")
        title = generator.generate_title(diff)
        logger.info(f"\nGenerated PR Title:\n\n{title}\n")

        if confirm(f"Update the title of PR #{args.pr}?", args.yes):
            github.update_pr(args.pr, repo, title=title)
            logger.info(f"Successfully updated PR #{args.pr} on GitHub!")

    else:
        username = GitClient().get_username()
        tag = make_review_comment_tag(username)

        logger.info(f"Listing comments for PR #{args.pr}...")
        comments = github.list_pr_comments(args.pr, repo)
        previous_comment = next((c for c in comments if tag in c.body), None)
        logger.debug(f"Found {len(comments)} comments for PR #{args.pr}")

        logger.info(f"Generating review for PR #{args.pr}...")
        markdown = generator.generate_review(diff, username)
        logger.info(f"\nGenerated Review:\n{markdown}")

        if confirm(f"Post this review to PR #{args.pr}?", args.yes):
            github.add_pr_comment(args.pr, repo, markdown)
            logger.info(f"Successfully added review comment to PR #{args.pr}!")

            if previous_comment:
                logger.info("Deleting previous review comment...")
                github.delete_pr_comment(args.pr, repo, previous_comment.id)

    return 0


def run_changelog(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    git = GitClient()

    logger.info(f"Generating changelog for range: {args.from_hash}..{args.to_hash}")
    commits = git.get_commit_range(args.from_hash, args.to_hash)
    if not commits:
        raise GitAiError(
            f"No commits found in range {args.from_hash}..{args.to_hash}. Please check your commit hashes."
        )

    logger.info(f"Found {len(commits)} commits. Generating changelog...")
    generator = get_generator(config, "changelog", args.model, args.context)
    changelog = generator.generate_changelog(commits)

    logger.info("\n" + "=" * 80)
    logger.info("GENERATED CHANGELOG")
    logger.info("=" * 80 + "\n")
    logger.info(changelog)
    return 0


def run_rules(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    GITAI_DIR.mkdir(parents=True, exist_ok=True)
    rule_files = sorted(p.name for p in RULES_DIR.glob("*.md")) if RULES_DIR.is_dir() else []

    if not rule_files:
        logger.error(
            f"No rule files found in {RULES_DIR}/\n"
            f"  Please create some .md files in {RULES_DIR}/ to define your rules.\n"
            f"  Example: echo \"Your rules content here\" > {RULES_DIR}/my-rules.md"
        )
        return 1

    logger.debug(f"Found {len(rule_files)} rule file(s): {', '.join(rule_files)}")

    if args.rule:
        selected = args.rule if args.rule.endswith(".md") else f"{args.rule}.md"
        if selected not in rule_files:
            raise GitAiError(f"Rule file {selected} not found in {RULES_DIR}/")
    elif len(rule_files) == 1:
        selected = rule_files[0]
    else:
        names = ", ".join(name[:-len(".md")] for name in rule_files)
        raise GitAiError(f"Several rule files found ({names}). Pick one with --rule.")
    logger.info(f"Selected rule file: {selected}")

    target = args.target or config.get("rules_target_file") or DEFAULT_RULES_TARGET

    if not confirm(f"Write rules to {target}?", args.yes):
        logger.info("Operation cancelled.")
        return 0

    rule_path = RULES_DIR / selected
    try:
        content = rule_path.read_text(encoding="utf-8")
    except OSError as e:
        raise GitAiError(f"Failed to read rule file: {rule_path}\n{e}") from e

    try:
        with open(target, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise GitAiError(f"Failed to write to target file: {target}\n{e}") from e

    logger.info(f"Successfully applied rules from {selected} to {target}!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gitai", description="AI Git Assistant")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generation = argparse.ArgumentParser(add_help=False)
    generation.add_argument("-c", "--context", help="Extra context to the AI for generating content")
    generation.add_argument("-m", "--model", help="Model to use (overrides config and last used model)")
    generation.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompts")

    commit = subparsers.add_parser(
        "commit", parents=[generation], help="Generate a commit message for the staged changes"
    )
    commit.add_argument(
        "--context-lines", "--cl", dest="context_lines", type=int, default=3,
        help="Number of context lines for git diff (default: 3, same as git's default)",
    )
    commit.set_defaults(handler=run_commit)

    gh = subparsers.add_parser("gh", parents=[generation], help="Generate PR title, description or review")
    gh.add_argument("--pr", type=int, required=True, help="The PR number")
    gh.add_argument(
        "--repo", help="Specify a custom repository (e.g., 'owner/repo'). Defaults to local detection."
    )
    gh.add_argument(
        "--action", choices=["details", "title", "review"], default="details",
        help="details: title and description, title: title only, review: post a review comment",
    )
    gh.set_defaults(handler=run_gh)

    changelog = subparsers.add_parser(
        "changelog", parents=[generation], help="Generate a changelog for a commit range"
    )
    changelog.add_argument(
        "--from", dest="from_hash", required=True, help="Starting commit hash for the changelog range"
    )
    changelog.add_argument(
        "--to", dest="to_hash", default="HEAD", help="Ending commit hash for the changelog range (defaults to HEAD)"
    )
    changelog.set_defaults(handler=run_changelog)

    rules = subparsers.add_parser("rules", help="Copy a rule file from .gitai/rules/ to a target file")
    rules.add_argument("--rule", help="Name of the rule file in .gitai/rules/")
    rules.add_argument("--target", help="The target file path to write the rules to (overrides config)")
    rules.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompts")
    rules.set_defaults(handler=run_rules)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to execute a gitai command."""
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)

    try:
        config = load_config()
        return args.handler(args, config)

    except GitAiError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
        return 130
    except Exception as e:
        logger.error(f"Error in main execution: {str(e)}")
        logger.debug(traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
