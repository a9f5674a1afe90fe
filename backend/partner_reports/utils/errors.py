"""Custom exception classes."""

from typing import Any

from fastapi import HTTPException, status


class ReportServiceError(Exception):
    """Base exception for partner report service errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(ReportServiceError):
    """No usable LLM provider is configured."""

    pass


class InvalidRequestError(ReportServiceError):
    """The inbound request failed validation."""

    status_code = status.HTTP_400_BAD_REQUEST


class LLMGenerationError(ReportServiceError):
    """Error during LLM content generation."""

    pass


class ProviderError(LLMGenerationError):
    """Failure reported by an upstream LLM provider.

    Carries the upstream HTTP status and provider error code so the error
    mapper can classify it without inspecting the raw payload.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        status: int | None = None,
        code: str | None = None,
        details: Any = None,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status = status
        self.code = code
        self.details = details
        self.retry_after = retry_after

    def __repr__(self) -> str:
        return (
            f"ProviderError(provider={self.provider!r}, status={self.status!r}, "
            f"code={self.code!r}, message={self.message!r})"
        )


def http_error(
    status_code: int,
    message: str,
    headers: dict | None = None,
) -> HTTPException:
    """Create an HTTPException with the given parameters."""
    return HTTPException(
        status_code=status_code,
        detail=message,
        headers=headers,
    )


def method_not_allowed(message: str = "Method not allowed") -> HTTPException:
    """Create a 405 Method Not Allowed exception."""
    return http_error(
        status.HTTP_405_METHOD_NOT_ALLOWED,
        message,
        headers={"Allow": "POST, OPTIONS"},
    )

