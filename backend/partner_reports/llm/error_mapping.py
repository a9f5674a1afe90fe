"""Map provider failures to stable HTTP statuses and user-facing messages."""

from dataclasses import dataclass
from typing import Any, Optional, Union

from .config import Provider
from .providers import OPENAI_QUOTA_EXHAUSTED_CODE

GENERIC_FAILURE_MESSAGE = "Failed to generate report"

_OPENAI_MESSAGES = {
    401: "OpenAI authentication failed. Please verify your OPENAI_API_KEY.",
    "quota": (
        "OpenAI quota exhausted for this API key. Please check OpenAI "
        "billing/usage and add credit, then retry."
    ),
    429: "OpenAI rate limit reached. Please wait a moment and try again.",
    400: "OpenAI request was rejected. Please verify the input and try again.",
}

_GEMINI_MESSAGES = {
    401: "Gemini authentication failed. Please verify your GEMINI_API_KEY.",
    429: (
        "Gemini rate limit/quota reached. Please wait and try again, or check "
        "Google AI Studio quota/billing."
    ),
    400: "Gemini request was rejected. Please verify the input and try again.",
    403: (
        "Gemini request forbidden. Ensure the Generative Language API is "
        "enabled for this key and that it has access."
    ),
    404: (
        "Gemini model not found. Use supported models (e.g. gemini-2.5-flash, "
        "gemini-2.5-flash-lite) and set GEMINI_REPORT_MODEL / "
        "GEMINI_ANALYSIS_MODEL if overridden."
    ),
}


@dataclass(frozen=True)
class NormalizedError:
    """HTTP status and message safe to return to the caller."""

    http_status: int
    user_message: str
    retry_after_seconds: Optional[float] = None

    def to_body(self) -> dict[str, Any]:
        """Render the JSON error body."""
        body: dict[str, Any] = {"error": self.user_message}
        if self.retry_after_seconds is not None:
            seconds = self.retry_after_seconds
            body["retryAfterSeconds"] = int(seconds) if float(seconds).is_integer() else seconds
        return body


def _fallback_status(status: Any) -> int:
    if isinstance(status, int) and not isinstance(status, bool) and 400 <= status <= 599:
        return status
    return 500


def _map_openai(status: Any, code: Optional[str], retry_after: Optional[float]) -> NormalizedError:
    if status == 401:
        return NormalizedError(401, _OPENAI_MESSAGES[401])
    if status == 429 and code == OPENAI_QUOTA_EXHAUSTED_CODE:
        return NormalizedError(429, _OPENAI_MESSAGES["quota"])
    if status == 429:
        return NormalizedError(429, _OPENAI_MESSAGES[429], retry_after)
    if status == 400:
        return NormalizedError(400, _OPENAI_MESSAGES[400])
    return NormalizedError(_fallback_status(status), GENERIC_FAILURE_MESSAGE)


def _map_gemini(status: Any, code: Optional[str], retry_after: Optional[float]) -> NormalizedError:
    if status == 429:
        return NormalizedError(429, _GEMINI_MESSAGES[429], retry_after)
    if status in (401, 400, 403, 404):
        return NormalizedError(status, _GEMINI_MESSAGES[status])
    return NormalizedError(_fallback_status(status), GENERIC_FAILURE_MESSAGE)


def map_provider_error(
    error: BaseException,
    provider: Union[Provider, str, None],
) -> NormalizedError:
    """Classify a generation failure for the HTTP boundary.

    Pure function of the error's status, provider code and retry hint, and
    the provider family. Errors without a status map to 500.

    Args:
        error: Failure raised while generating (usually a ProviderError)
        provider: Provider the call was made against

    Returns:
        NormalizedError with the status and message to return
    """
    status = getattr(error, "status", None)
    code = getattr(error, "code", None)
    retry_after = getattr(error, "retry_after", None)

    name = provider.value if isinstance(provider, Provider) else (provider or "")
    if name.lower() == Provider.GEMINI.value:
        return _map_gemini(status, code, retry_after)
    return _map_openai(status, code, retry_after)
