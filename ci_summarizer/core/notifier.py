"""
CI Summarizer - Notifiers
=========================

Writes results to stdout between banner lines, and optionally posts a
summary to a Slack incoming webhook.
"""

from typing import Optional
import httpx
import click

from ci_summarizer.constants import Banner
from ci_summarizer.utils.logging import get_logger

logger = get_logger(__name__)


def print_review_start() -> None:
    click.echo(Banner.REVIEW_START)


def print_commit_review(sha: str, text: str) -> None:
    """Print one commit's review block."""
    click.echo(Banner.REVIEW_COMMIT.format(sha=sha))
    click.echo(text)
    click.echo(Banner.REVIEW_COMMIT_END)


def print_review_end() -> None:
    click.echo(Banner.REVIEW_END)


def print_log_summary(text: str) -> None:
    click.echo(Banner.LOGS_START)
    click.echo(text)
    click.echo(Banner.LOGS_END)


def print_release_notes(text: str) -> None:
    click.echo(Banner.RELEASE_START)
    click.echo(text)
    click.echo(Banner.RELEASE_END)


class SlackNotifier:
    """
    Posts messages to a Slack incoming webhook.

    Notification is best effort: a missing webhook URL or a failed post
    is logged and never fails the run.

    Example:
        notifier = SlackNotifier(settings.slack_webhook_url)
        await notifier.post(summary)
    """

    def __init__(
        self,
        webhook_url: Optional[str],
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the notifier.

        Args:
            webhook_url: Slack incoming webhook URL; None disables posting
            timeout_seconds: HTTP request timeout
            transport: Optional httpx transport for tests
        """
        self.webhook_url = webhook_url
        self.timeout = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport
            )
        return self._client

    async def post(self, message: str) -> bool:
        """
        Post a message to the webhook.

        Returns:
            True if Slack accepted the message, False otherwise
        """
        if not self.webhook_url:
            logger.warning("SLACK_WEBHOOK_URL not provided; skipping Slack notification.")
            return False

        client = await self._get_client()

        try:
            response = await client.post(
                self.webhook_url,
                json={"text": message},
                headers={"Content-Type": "application/json"}
            )
        except httpx.HTTPError as e:
            logger.error(
                f"HTTP error posting to Slack: {e}",
                extra={"error": str(e)}
            )
            return False

        if response.is_success:
            logger.info("Posted summary to Slack.")
            return True

        logger.warning(
            f"Failed to post to Slack: {response.status_code}",
            extra={"status_code": response.status_code, "response": response.text}
        )
        return False

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
