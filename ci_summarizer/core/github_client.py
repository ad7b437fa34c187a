"""
CI Summarizer - GitHub Client
=============================

Thin wrappers over the GitHub REST API:
- raw diff of a single commit
- commits between two refs (compare)
- most recent commits on the default branch
"""

from typing import Any, Optional
import httpx

from ci_summarizer.config import Settings
from ci_summarizer.constants import (
    GITHUB_DIFF_MEDIA_TYPE,
    GITHUB_JSON_MEDIA_TYPE,
    RECENT_COMMITS_PER_PAGE,
)
from ci_summarizer.exceptions import UpstreamError
from ci_summarizer.schemas import CommitInfo
from ci_summarizer.utils.http_client import ApiClient, ApiClientConfig
from ci_summarizer.utils.logging import get_logger

logger = get_logger(__name__)


class GitHubClient:
    """
    Reads commits and diffs from one GitHub repository.

    Example:
        async with GitHubClient.from_settings(settings) as github:
            commits = await github.compare_commits("v1.0.0", "v1.1.0")
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        api_url: str = "https://api.github.com",
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the GitHub client.

        Args:
            owner: Repository owner
            repo: Repository name
            token: Token sent as a Bearer credential
            api_url: Base URL of the GitHub API
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport for tests
        """
        self.owner = owner
        self.repo = repo
        self._api = ApiClient(
            api_url,
            auth_header=f"Bearer {token}",
            config=ApiClientConfig(timeout_seconds=timeout_seconds),
            transport=transport
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "GitHubClient":
        return cls(
            owner=settings.github_owner,
            repo=settings.github_repo,
            token=settings.github_token,
            api_url=settings.github_api_url,
            timeout_seconds=settings.http_timeout_seconds,
            transport=transport
        )

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    async def fetch_commit_diff(
        self,
        sha: str,
        owner: Optional[str] = None,
        repo: Optional[str] = None
    ) -> str:
        """
        Fetch the raw diff of a single commit.

        Args:
            sha: Commit SHA
            owner: Repository owner, defaults to the configured one
            repo: Repository name, defaults to the configured one

        Returns:
            Unified diff as plain text
        """
        path = f"/repos/{owner or self.owner}/{repo or self.repo}/commits/{sha}"
        return await self._api.get_text(
            path,
            headers={"Accept": GITHUB_DIFF_MEDIA_TYPE},
            error_message=f"Failed to fetch commit diff for {sha}"
        )

    async def compare(self, base: str, head: str) -> dict:
        """Return the raw compare payload for ``base...head``."""
        path = f"{self.repo_path}/compare/{base}...{head}"
        logger.debug(f"Compare URL = {self._api.base_url}{path}")
        return await self._api.get_json(
            path,
            headers={"Accept": GITHUB_JSON_MEDIA_TYPE},
            error_message="Failed to compare commits"
        )

    async def compare_commits(self, base: str, head: str) -> list[CommitInfo]:
        """
        List the commits between two refs, oldest first.

        Raises:
            UpstreamError: if the call fails, the payload has no
                ``commits`` list, or an entry is malformed
        """
        payload = await self.compare(base, head)
        commits = payload.get("commits") if isinstance(payload, dict) else None
        if commits is None:
            raise UpstreamError("No commits found in compare data.")
        return _parse_commits(commits, "compare")

    async def recent_commits(
        self,
        per_page: int = RECENT_COMMITS_PER_PAGE
    ) -> list[CommitInfo]:
        """List the most recent commits of the repository, newest first."""
        data = await self._api.get_json(
            f"{self.repo_path}/commits",
            params={"per_page": per_page},
            headers={"Accept": GITHUB_JSON_MEDIA_TYPE},
            error_message="Failed to fetch commits"
        )
        return _parse_commits(data, "commits list")

    async def close(self) -> None:
        await self._api.close()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _parse_commits(data: Any, source: str) -> list[CommitInfo]:
    """
    Parse a list of GitHub commit objects.

    Raises:
        UpstreamError: unless ``data`` is a list of objects that each carry
            a non-empty string ``sha``
    """
    if not isinstance(data, list):
        raise UpstreamError(f"Malformed {source} payload: commits is not a list.")

    commits = []
    for entry in data:
        sha = entry.get("sha") if isinstance(entry, dict) else None
        if not isinstance(sha, str) or not sha:
            raise UpstreamError(f"Malformed {source} payload: commit without a SHA.")

        commit = entry.get("commit")
        message = commit.get("message") if isinstance(commit, dict) else None
        commits.append(CommitInfo(
            sha=sha,
            message=message.strip() if isinstance(message, str) else ""
        ))
    return commits
