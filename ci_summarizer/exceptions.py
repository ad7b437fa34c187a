"""CI Summarizer exception classes."""

from typing import Optional


class CISummarizerError(Exception):
    """Base exception for all CI Summarizer errors."""

    pass


class ConfigurationError(CISummarizerError):
    """Raised when a required setting is missing or invalid."""

    pass


class UpstreamError(CISummarizerError):
    """
    Raised when an external service call fails.

    Carries the HTTP status and reason phrase when the failure came
    from a response rather than from the transport.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class GenerationError(UpstreamError):
    """Raised when the model returns an unusable answer or tool call."""

    pass
