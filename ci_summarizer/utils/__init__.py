"""
CI Summarizer - Utilities Package
=================================

Logging and HTTP client helpers shared by every command.
"""

from ci_summarizer.utils.logging import get_logger, setup_logging, new_run_id
from ci_summarizer.utils.http_client import ApiClient, ApiClientConfig

__all__ = [
    "get_logger",
    "setup_logging",
    "new_run_id",
    "ApiClient",
    "ApiClientConfig",
]
