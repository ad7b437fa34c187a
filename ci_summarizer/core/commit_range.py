"""
CI Summarizer - Commit Range Resolution
=======================================

Turns the commit range handed over by CI into the commits to work on.

Review flow (two steps):
1. Primary: compare ``base...head`` on GitHub and take every commit.
2. Fallback: review only ``head`` (or the pipeline SHA when there is
   no usable range).

Release flow:
1. Primary: compare the tag range and take every commit message.
2. Fallback: take the messages of the most recent commits.

Planning and fallback selection are pure functions. The compare step
reports failure as a CompareOutcome value, so switching to the fallback
never depends on an exception escaping the primary step.
"""

from typing import Optional

from ci_summarizer.config import Settings
from ci_summarizer.constants import RECENT_COMMITS_PER_PAGE
from ci_summarizer.core.github_client import GitHubClient
from ci_summarizer.exceptions import ConfigurationError, UpstreamError
from ci_summarizer.schemas import (
    CommitRange,
    CompareOutcome,
    ResolutionMode,
    ResolutionPlan,
)
from ci_summarizer.utils.logging import get_logger

logger = get_logger(__name__)

TWO_DOT = ".."
THREE_DOT = "..."


def normalize_range(raw: Optional[str]) -> Optional[str]:
    """
    Convert a two-dot range to three-dot form.

    Only the first ``..`` is replaced, and a string that already holds
    ``...`` is returned as is. Blank input yields None.
    """
    if raw is None or not raw.strip():
        return None

    value = raw.strip()
    if TWO_DOT in value and THREE_DOT not in value:
        value = value.replace(TWO_DOT, THREE_DOT, 1)
        logger.debug(f"Replaced two-dot with three-dot in commit range => {value}")
    return value


def parse_range(raw: Optional[str]) -> Optional[CommitRange]:
    """
    Parse ``base..head`` or ``base...head`` into a CommitRange.

    Returns None when there is no range or either side is empty.
    """
    value = normalize_range(raw)
    if value is None or THREE_DOT not in value:
        return None

    base, head = value.split(THREE_DOT, 1)
    base, head = base.strip(), head.strip()
    if not base or not head:
        return None
    return CommitRange(base=base, head=head)


def plan_resolution(
    commit_range: Optional[str],
    single_sha: Optional[str]
) -> ResolutionPlan:
    """
    Decide how the commits to review are resolved. Makes no network call.

    Raises:
        ConfigurationError: if neither a range nor a SHA is available
    """
    parsed = parse_range(commit_range)
    if parsed is not None:
        return ResolutionPlan(
            mode=ResolutionMode.COMPARE,
            commit_range=parsed,
            fallback_sha=parsed.head
        )

    normalized = normalize_range(commit_range)
    if normalized and TWO_DOT not in normalized:
        # A range without a separator names a single ref
        return ResolutionPlan(mode=ResolutionMode.SINGLE, fallback_sha=normalized)

    sha = single_sha.strip() if single_sha else ""
    if sha:
        return ResolutionPlan(mode=ResolutionMode.SINGLE, fallback_sha=sha)

    raise ConfigurationError("No commit or commit range found in environment variables.")


def single_commit_fallback(plan: ResolutionPlan) -> list[str]:
    """The commits reviewed when comparison is unavailable."""
    return [plan.fallback_sha]


async def try_compare(github: GitHubClient, commit_range: CommitRange) -> CompareOutcome:
    """
    Primary step: list the commits of ``commit_range``.

    Never raises for upstream failures; an empty outcome with ``error``
    set describes what went wrong.
    """
    logger.debug(f"Base commit = {commit_range.base}")
    logger.debug(f"Head commit = {commit_range.head}")

    try:
        commits = await github.compare_commits(commit_range.base, commit_range.head)
    except UpstreamError as e:
        return CompareOutcome(error=str(e))

    if not commits:
        return CompareOutcome(error="No commits available in comparison data.")
    return CompareOutcome(commits=commits)


async def resolve_commits(settings: Settings, github: GitHubClient) -> list[str]:
    """
    Resolve the ordered, non-empty list of commit SHAs to review.

    Args:
        settings: Validated settings (commit range and pipeline SHA)
        github: Client for the compare call

    Raises:
        ConfigurationError: if neither a range nor a SHA is configured
    """
    logger.debug(f"SEMAPHORE_GIT_COMMIT_RANGE: {settings.semaphore_git_commit_range}")
    logger.debug(f"SEMAPHORE_GIT_SHA: {settings.semaphore_git_sha}")

    plan = plan_resolution(
        settings.semaphore_git_commit_range,
        settings.semaphore_git_sha
    )

    if plan.mode == ResolutionMode.COMPARE:
        outcome = await try_compare(github, plan.commit_range)
        if outcome.succeeded:
            logger.info(
                f"Resolved {len(outcome.commits)} commits from {plan.commit_range.spec}",
                extra={"count": len(outcome.commits)}
            )
            return outcome.shas

        logger.warning(
            f"Compare failed, falling back to single commit: {outcome.error}",
            extra={"range": plan.commit_range.spec, "fallback": plan.fallback_sha}
        )

    logger.info(f"Using single commit flow with commit: {plan.fallback_sha}")
    return single_commit_fallback(plan)


async def resolve_commit_messages(
    github: GitHubClient,
    tag_range: Optional[str],
    per_page: int = RECENT_COMMITS_PER_PAGE
) -> list[str]:
    """
    Collect the commit messages that go into the release notes.

    Compares ``tag_range`` when given, otherwise (or when that yields
    nothing) falls back to the ``per_page`` most recent commits.

    Raises:
        UpstreamError: if neither source produced a message, or the
            recent-commits call itself failed
    """
    messages: list[str] = []

    if tag_range:
        parsed = parse_range(tag_range)
        if parsed is None:
            logger.warning(
                f"Invalid release range {tag_range!r}, expected 'base...head'. "
                "Falling back to recent commits."
            )
        else:
            outcome = await try_compare(github, parsed)
            if outcome.succeeded:
                messages = outcome.messages
            else:
                logger.warning(f"Compare failed, falling back to recent commits: {outcome.error}")

    if not messages:
        logger.info("No compare-based commits found, fetching recent commits.")
        recent = await github.recent_commits(per_page=per_page)
        messages = [c.message for c in recent if c.message]

    if not messages:
        raise UpstreamError("No commit messages retrieved from either compare or fallback.")

    logger.debug("Combined commit messages =>\n" + "\n".join(messages))
    return messages
