"""AI assistant for commit messages, pull requests, reviews and changelogs."""

__version__ = "2.0.0"
