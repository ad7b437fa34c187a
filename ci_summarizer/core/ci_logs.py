"""
CI Summarizer - CI Log Sources
==============================

Fetches job logs from the Semaphore API and reads log files from disk
for the log diagnosis command.
"""

from pathlib import Path
from typing import Optional
import httpx

from ci_summarizer.config import Settings
from ci_summarizer.exceptions import ConfigurationError, UpstreamError
from ci_summarizer.utils.http_client import ApiClient, ApiClientConfig
from ci_summarizer.utils.logging import get_logger

logger = get_logger(__name__)


class SemaphoreLogFetcher:
    """
    Fetches the log of one job of a Semaphore workflow.

    Example:
        fetcher = SemaphoreLogFetcher("https://api.semaphoreci.com", token)
        text = await fetcher.fetch_job_logs(workflow_id, job_id)
    """

    def __init__(
        self,
        api_url: str,
        token: Optional[str],
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the log fetcher.

        Args:
            api_url: Base URL of the Semaphore API
            token: API token; fetching fails until one is configured
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport for tests
        """
        self.token = token
        self._api = ApiClient(
            api_url,
            auth_header=f"Token {token}" if token else None,
            config=ApiClientConfig(timeout_seconds=timeout_seconds),
            transport=transport
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "SemaphoreLogFetcher":
        return cls(
            api_url=settings.semaphore_api_url,
            token=settings.semaphore_token,
            timeout_seconds=settings.http_timeout_seconds,
            transport=transport
        )

    async def fetch_job_logs(self, workflow_id: str, job_id: str) -> str:
        """
        Fetch the raw log of a job.

        Raises:
            ConfigurationError: if SEMAPHORE_TOKEN is not set
            UpstreamError: on a failed request
        """
        if not self.token:
            raise ConfigurationError("SEMAPHORE_TOKEN is not set in environment.")

        text = await self._api.get_text(
            f"/workflows/{workflow_id}/jobs/{job_id}/logs",
            error_message="Failed to fetch logs"
        )

        logger.info(
            f"Fetched {len(text)} characters of Semaphore logs",
            extra={"workflow_id": workflow_id, "job_id": job_id}
        )
        return text

    async def close(self) -> None:
        await self._api.close()


class LocalLogReader:
    """Reads UTF-8 log files located under a root directory."""

    def __init__(self, root: str = "."):
        self.root = Path(root).resolve()

    def read(self, path: str) -> str:
        """
        Read a log file.

        Relative paths are taken from the root. Paths that resolve
        outside the root are refused.

        Raises:
            UpstreamError: if the path is outside the root or unreadable
        """
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = candidate.resolve()

        if resolved != self.root and self.root not in resolved.parents:
            raise UpstreamError(f"Refusing to read {path}: outside {self.root}")

        try:
            text = resolved.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise UpstreamError(f"Failed to read log file {path}: {e}") from e

        logger.info(
            f"Read {len(text)} characters from {resolved}",
            extra={"path": str(resolved)}
        )
        return text
