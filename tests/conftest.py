"""
CI Summarizer - Shared Test Fixtures
====================================
"""

import logging
from types import SimpleNamespace
from typing import Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from ci_summarizer.config import Settings, get_settings
from ci_summarizer.core.github_client import GitHubClient


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host environment variables and cached settings out of tests."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)
    get_settings.cache_clear()

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    get_settings.cache_clear()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build Settings without reading the environment or a .env file."""
    def factory(**overrides) -> Settings:
        values = {
            "github_owner": "acme",
            "github_repo": "widgets",
            "github_token": "gh-token",
            "openai_api_key": "sk-test",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return factory


def github_payload(shas: list[str]) -> list[dict]:
    return [{"sha": sha, "commit": {"message": f"feat: change {sha}"}} for sha in shas]


@pytest.fixture
def make_github() -> Callable[..., GitHubClient]:
    """Build a GitHubClient whose requests are answered by a handler."""
    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> GitHubClient:
        return GitHubClient(
            owner="acme",
            repo="widgets",
            token="gh-token",
            transport=httpx.MockTransport(handler)
        )
    return factory


@pytest.fixture
def compare_handler():
    """
    Build a handler answering compare, diff and commits-list requests.

    Every requested path is recorded in ``handler.calls``.
    """
    def factory(
        compare_shas: Optional[list[str]] = None,
        compare_status: int = 200,
        recent_shas: Optional[list[str]] = None,
        compare_body: Optional[dict] = None
    ):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            path = request.url.path
            if "/compare/" in path:
                if compare_status != 200:
                    return httpx.Response(compare_status, text="Not Found")
                if compare_body is not None:
                    return httpx.Response(200, json=compare_body)
                return httpx.Response(200, json={"commits": github_payload(compare_shas or [])})
            if path.endswith("/commits"):
                return httpx.Response(200, json=github_payload(recent_shas or []))
            if "/commits/" in path:
                sha = path.rsplit("/", 1)[-1]
                return httpx.Response(200, text=f"diff --git a/{sha}.py b/{sha}.py")
            return httpx.Response(404, text="Not Found")

        handler.calls = calls
        return handler
    return factory


def make_tool_call(call_id: str, name: str, arguments: str) -> SimpleNamespace:
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments)
    )


def make_completion(content: Optional[str] = None, tool_calls: Optional[list] = None) -> SimpleNamespace:
    """A chat-completion response shaped like the openai SDK's."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message)],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5)
    )


@pytest.fixture
def fake_openai():
    """An AsyncOpenAI stand-in whose completions are queued per test."""
    def factory(*responses) -> MagicMock:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=list(responses))
        client.close = AsyncMock()
        return client
    return factory


@pytest.fixture
def completion():
    return make_completion


@pytest.fixture
def tool_call():
    return make_tool_call
