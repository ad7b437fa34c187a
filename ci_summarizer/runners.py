"""
CI Summarizer - Runners
=======================

The three end-to-end flows behind the CLI commands:

- review:  resolve commits -> review each commit -> print
- logs:    diagnose CI logs with the log tools -> print -> Slack
- release: resolve commit messages -> write release notes -> print

Each runner validates the settings it needs before any network call,
works strictly sequentially and closes the clients it created.
Collaborators can be passed in; otherwise they are built from settings.
"""

from typing import Optional

from ci_summarizer.config import Settings
from ci_summarizer.constants import RECENT_COMMITS_PER_PAGE, StepBudget
from ci_summarizer.core.ci_logs import LocalLogReader, SemaphoreLogFetcher
from ci_summarizer.core.commit_range import resolve_commit_messages, resolve_commits
from ci_summarizer.core.generator import TextGenerator
from ci_summarizer.core.github_client import GitHubClient
from ci_summarizer.core.notifier import (
    SlackNotifier,
    print_log_summary,
    print_commit_review,
    print_release_notes,
    print_review_end,
    print_review_start,
)
from ci_summarizer.core.prompts import (
    LOGS_SYSTEM_PROMPT,
    RELEASE_SYSTEM_PROMPT,
    REVIEW_SYSTEM_PROMPT,
    logs_prompt,
    release_prompt,
    review_prompt,
)
from ci_summarizer.core.tools import commit_diff_tool, local_logs_tool, semaphore_logs_tool
from ci_summarizer.schemas import ReviewResult
from ci_summarizer.utils.logging import get_logger

logger = get_logger(__name__)


class _Resources:
    """Clients created by a runner, closed when the run ends."""

    def __init__(self):
        self._owned: list = []

    def own(self, resource):
        self._owned.append(resource)
        return resource

    async def close(self) -> None:
        """Close every owned client, newest first; a failed close is logged."""
        for resource in reversed(self._owned):
            try:
                await resource.close()
            except Exception as e:
                logger.warning(
                    f"Failed to close {type(resource).__name__}: {e}",
                    extra={"error": str(e)}
                )
        self._owned.clear()


async def run_review(
    settings: Settings,
    github: Optional[GitHubClient] = None,
    generator: Optional[TextGenerator] = None,
    slack: Optional[SlackNotifier] = None,
    notify_slack: bool = False
) -> ReviewResult:
    """
    Review every commit of the pipeline's commit range.

    Returns:
        ReviewResult with one review per commit, in resolver order
    """
    settings.require_github()
    settings.require_model()

    resources = _Resources()
    try:
        github = github or resources.own(GitHubClient.from_settings(settings))
        generator = generator or resources.own(TextGenerator.from_settings(settings))

        commits = await resolve_commits(settings, github)
        diff_tool = commit_diff_tool(github)

        result = ReviewResult()
        print_review_start()
        for sha in commits:
            logger.info(f"Reviewing commit {sha}", extra={"sha": sha})
            generation = await generator.generate(
                REVIEW_SYSTEM_PROMPT,
                review_prompt(settings.github_owner, settings.github_repo, sha),
                tools=[diff_tool],
                max_steps=StepBudget.REVIEW
            )
            result.add(sha, generation.text)
            print_commit_review(sha, generation.text)

        print_review_end()

        if notify_slack:
            slack = slack or resources.own(SlackNotifier(settings.slack_webhook_url))
            summary = "\n\n".join(
                f"*{sha}*\n{text}" for sha, text in result.reviews.items()
            )
            await slack.post(summary)

        return result
    finally:
        await resources.close()


async def run_log_analysis(
    settings: Settings,
    log_file: Optional[str] = None,
    workflow_id: Optional[str] = None,
    job_id: Optional[str] = None,
    fetcher: Optional[SemaphoreLogFetcher] = None,
    generator: Optional[TextGenerator] = None,
    slack: Optional[SlackNotifier] = None
) -> str:
    """
    Diagnose CI logs and post the summary to Slack.

    The workflow and job IDs default to the pipeline's own
    SEMAPHORE_WORKFLOW_ID and SEMAPHORE_JOB_ID.

    Returns:
        The generated diagnosis
    """
    settings.require_model()

    workflow_id = workflow_id or settings.semaphore_workflow_id
    job_id = job_id or settings.semaphore_job_id

    resources = _Resources()
    try:
        fetcher = fetcher or resources.own(SemaphoreLogFetcher.from_settings(settings))
        generator = generator or resources.own(TextGenerator.from_settings(settings))
        slack = slack or resources.own(SlackNotifier(settings.slack_webhook_url))

        tools = [
            local_logs_tool(LocalLogReader(settings.local_log_root)),
            semaphore_logs_tool(fetcher),
        ]
        generation = await generator.generate(
            LOGS_SYSTEM_PROMPT,
            logs_prompt(log_file, workflow_id, job_id),
            tools=tools,
            max_steps=StepBudget.LOGS
        )

        print_log_summary(generation.text)
        await slack.post(generation.text)
        return generation.text
    finally:
        await resources.close()


async def run_release_notes(
    settings: Settings,
    tag_range: Optional[str] = None,
    per_page: int = RECENT_COMMITS_PER_PAGE,
    github: Optional[GitHubClient] = None,
    generator: Optional[TextGenerator] = None,
    slack: Optional[SlackNotifier] = None,
    notify_slack: bool = False
) -> str:
    """
    Write release notes for a tag range (RELEASE_TAG_RANGE by default).

    Returns:
        The generated release notes
    """
    settings.require_github()
    settings.require_model()

    tag_range = tag_range or settings.release_tag_range
    logger.debug(f"GITHUB_OWNER: {settings.github_owner}")
    logger.debug(f"GITHUB_REPO: {settings.github_repo}")
    logger.debug(f"RELEASE_TAG_RANGE: {tag_range or '(none)'}")

    resources = _Resources()
    try:
        github = github or resources.own(GitHubClient.from_settings(settings))
        generator = generator or resources.own(TextGenerator.from_settings(settings))

        messages = await resolve_commit_messages(github, tag_range, per_page=per_page)
        generation = await generator.generate(
            RELEASE_SYSTEM_PROMPT,
            release_prompt(messages),
            max_steps=StepBudget.RELEASE
        )

        print_release_notes(generation.text)

        if notify_slack:
            slack = slack or resources.own(SlackNotifier(settings.slack_webhook_url))
            await slack.post(generation.text)

        return generation.text
    finally:
        await resources.close()
