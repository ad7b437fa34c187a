"""
CI Summarizer - Configuration
=============================

Centralized configuration using Pydantic Settings. Every value comes
from the environment (or an optional .env file) and is validated once
at startup by the command that needs it.
"""

from typing import Optional
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ci_summarizer.constants import (
    DEFAULT_OPENAI_MODEL,
    GITHUB_API_URL,
    SEMAPHORE_API_URL,
)
from ci_summarizer.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Field names map to upper-cased environment variables, so
    ``github_owner`` is read from ``GITHUB_OWNER``.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    # HTTP
    http_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout applied to every outbound HTTP request"
    )

    # GitHub
    github_owner: Optional[str] = Field(
        default=None,
        description="Owner (user or organization) of the repository"
    )
    github_repo: Optional[str] = Field(
        default=None,
        description="Repository name"
    )
    github_token: Optional[str] = Field(
        default=None,
        description="Token used as a Bearer credential for the GitHub API"
    )
    github_api_url: str = Field(default=GITHUB_API_URL)

    # Model
    openai_api_key: Optional[str] = Field(default=None)
    openai_model: str = Field(
        default=DEFAULT_OPENAI_MODEL,
        description="Chat-completion model used for every generation"
    )
    openai_base_url: Optional[str] = Field(
        default=None,
        description="Alternative OpenAI-compatible endpoint"
    )

    # Semaphore CI
    semaphore_git_sha: Optional[str] = Field(
        default=None,
        description="SHA of the commit that triggered the pipeline"
    )
    semaphore_git_commit_range: Optional[str] = Field(
        default=None,
        description="Commit range of the push, e.g. 'abc..def'"
    )
    semaphore_token: Optional[str] = Field(default=None)
    semaphore_api_url: str = Field(default=SEMAPHORE_API_URL)
    semaphore_workflow_id: Optional[str] = Field(default=None)
    semaphore_job_id: Optional[str] = Field(default=None)

    # Notifications
    slack_webhook_url: Optional[str] = Field(default=None)

    # Release notes
    release_tag_range: Optional[str] = Field(
        default=None,
        description="Tag range for release notes, e.g. 'v1.0.0..v1.1.0'"
    )

    # Local log tool
    local_log_root: str = Field(
        default=".",
        description="Directory the local log tool is allowed to read from"
    )

    def require(self, *field_names: str) -> None:
        """
        Ensure each named setting has a non-empty value.

        Raises:
            ConfigurationError: naming the first missing environment variable
        """
        for name in field_names:
            if not getattr(self, name):
                raise ConfigurationError(
                    f"Environment variable {name.upper()} is not set."
                )

    def require_github(self) -> None:
        self.require("github_owner", "github_repo", "github_token")

    def require_model(self) -> None:
        self.require("openai_api_key")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
