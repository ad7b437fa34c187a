"""
CI Summarizer - Command Line Entry Point
========================================

``ci-summarizer review | logs | release``

Each command loads and validates settings, configures logging, runs
its flow, and maps any unrecovered error to exit code 1 so the CI job
fails.
"""

import asyncio
import sys
from typing import Awaitable, Callable, Optional

import click
from pydantic import ValidationError

from ci_summarizer.config import Settings, get_settings
from ci_summarizer.constants import Command, RECENT_COMMITS_PER_PAGE
from ci_summarizer.exceptions import CISummarizerError
from ci_summarizer.runners import run_log_analysis, run_release_notes, run_review
from ci_summarizer.utils.logging import get_logger, new_run_id, setup_logging

logger = get_logger(__name__)


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, ...)")
@click.option(
    "--json-logs/--text-logs",
    default=None,
    help="Emit JSON log lines instead of text (default: LOG_JSON)",
)
@click.version_option(package_name="ci-summarizer")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], json_logs: Optional[bool]) -> None:
    """CI Summarizer: AI commit reviews, CI log diagnosis and release notes.

    \b
    Examples:
        ci-summarizer review                   # Review the pipeline's commits
        ci-summarizer logs --log-file ci.log   # Diagnose CI logs
        ci-summarizer release --range v1.0..v1.1
    """
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["json_logs"] = json_logs


def _execute(
    ctx: click.Context,
    command: Command,
    flow: Callable[[Settings], Awaitable[object]]
) -> None:
    """Run a flow under the single top-level error handler."""
    try:
        settings = get_settings()
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    json_logs = ctx.obj.get("json_logs")
    setup_logging(
        service_name=command.value,
        log_level=ctx.obj.get("log_level") or settings.log_level,
        json_output=settings.log_json if json_logs is None else json_logs
    )
    run_id = new_run_id()
    logger.info(f"Starting {command.value}", extra={"run_id": run_id})

    try:
        asyncio.run(flow(settings))
    except CISummarizerError as e:
        logger.error(f"Error running {command.value}: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unhandled exception running {command.value}: {e}", exc_info=True)
        sys.exit(1)


@cli.command("review")
@click.option("--slack", "notify_slack", is_flag=True, help="Also post the reviews to Slack")
@click.pass_context
def review_command(ctx: click.Context, notify_slack: bool) -> None:
    """Review each commit of SEMAPHORE_GIT_COMMIT_RANGE (or SEMAPHORE_GIT_SHA)."""
    _execute(
        ctx,
        Command.REVIEW,
        lambda settings: run_review(settings, notify_slack=notify_slack)
    )


@cli.command("logs")
@click.option("--log-file", default=None, help="Local log file the model may read")
@click.option("--workflow-id", default=None, help="Semaphore workflow ID (default: SEMAPHORE_WORKFLOW_ID)")
@click.option("--job-id", default=None, help="Semaphore job ID (default: SEMAPHORE_JOB_ID)")
@click.pass_context
def logs_command(
    ctx: click.Context,
    log_file: Optional[str],
    workflow_id: Optional[str],
    job_id: Optional[str]
) -> None:
    """Diagnose CI logs and post the summary to Slack."""
    _execute(
        ctx,
        Command.LOGS,
        lambda settings: run_log_analysis(
            settings,
            log_file=log_file,
            workflow_id=workflow_id,
            job_id=job_id
        )
    )


@cli.command("release")
@click.option("--range", "tag_range", default=None, help="Tag range (default: RELEASE_TAG_RANGE)")
@click.option(
    "--per-page",
    default=RECENT_COMMITS_PER_PAGE,
    show_default=True,
    type=click.IntRange(1, 100),
    help="Recent commits used when the range cannot be compared",
)
@click.option("--slack", "notify_slack", is_flag=True, help="Also post the notes to Slack")
@click.pass_context
def release_command(
    ctx: click.Context,
    tag_range: Optional[str],
    per_page: int,
    notify_slack: bool
) -> None:
    """Write release notes from the commits of a tag range."""
    _execute(
        ctx,
        Command.RELEASE,
        lambda settings: run_release_notes(
            settings,
            tag_range=tag_range,
            per_page=per_page,
            notify_slack=notify_slack
        )
    )


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
