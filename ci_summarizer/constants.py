"""
CI Summarizer - Constants
=========================

Endpoint defaults, model step budgets and console banners shared by
every command.
"""

from enum import Enum


class Command(str, Enum):
    """Names of the summarizer commands."""
    REVIEW = "review"
    LOGS = "logs"
    RELEASE = "release"


# External API defaults
GITHUB_API_URL = "https://api.github.com"
SEMAPHORE_API_URL = "https://api.semaphoreci.com"
DEFAULT_OPENAI_MODEL = "gpt-4o"

# GitHub media types
GITHUB_DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
GITHUB_JSON_MEDIA_TYPE = "application/vnd.github.v3+json"


class StepBudget:
    """Maximum number of model calls per generation."""
    REVIEW = 2      # one diff fetch, then the review
    LOGS = 3        # up to two log fetches, then the diagnosis
    RELEASE = 1     # commit messages are already in the prompt


RECENT_COMMITS_PER_PAGE = 10


class Banner:
    """Literal banner strings that delimit console output."""
    REVIEW_START = "=== AI Commit-by-Commit Review ==="
    REVIEW_COMMIT = "--- Review for commit {sha} ---"
    REVIEW_COMMIT_END = "---------------------------------"
    REVIEW_END = "================================="

    LOGS_START = "=== Log Analysis Summary ==="
    LOGS_END = "================================"

    RELEASE_START = "=== AI-Generated Release Notes ==="
    RELEASE_END = "=================================="
