"""
CI Summarizer - Core Package
"""

from ci_summarizer.core.commit_range import resolve_commits, resolve_commit_messages
from ci_summarizer.core.github_client import GitHubClient
from ci_summarizer.core.ci_logs import SemaphoreLogFetcher, LocalLogReader
from ci_summarizer.core.generator import TextGenerator
from ci_summarizer.core.notifier import SlackNotifier

__all__ = [
    "resolve_commits",
    "resolve_commit_messages",
    "GitHubClient",
    "SemaphoreLogFetcher",
    "LocalLogReader",
    "TextGenerator",
    "SlackNotifier",
]
