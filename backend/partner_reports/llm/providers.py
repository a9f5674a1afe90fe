"""Provider clients for text generation.

Each client turns a (system prompt, user prompt, sampling params) request
into plain text, and turns upstream failures into ProviderError so callers
never see provider-specific exception types or payloads.
"""

import json
import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import quote

import httpx
import litellm

from partner_reports.utils.errors import ProviderError

from .config import Provider

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# OpenAI reports billing exhaustion as a 429 with this error code
OPENAI_QUOTA_EXHAUSTED_CODE = "insufficient_quota"

_RETRY_INFO_TYPE = "type.googleapis.com/google.rpc.RetryInfo"


def parse_retry_after(value: Any) -> Optional[float]:
    """Parse a retry-after hint in seconds ("5", 5, "39s").

    Returns None for missing, negative, non-finite or non-numeric values
    (e.g. HTTP dates).
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        seconds = float(value)
        return seconds if math.isfinite(seconds) and seconds >= 0 else None
    text = str(value).strip().lower()
    if text.endswith("s"):
        text = text[:-1]
    try:
        seconds = float(text)
    except ValueError:
        return None
    return seconds if math.isfinite(seconds) and seconds >= 0 else None


class TextGenerationClient(ABC):
    """Uniform interface over one provider's text-generation endpoint."""

    provider: Provider

    @abstractmethod
    async def generate(
        self,
        api_key: str,
        model: str,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> Optional[str]:
        """Generate text, raising ProviderError on upstream failure."""


class GeminiClient(TextGenerationClient):
    """Client for the Gemini generateContent REST endpoint."""

    provider = Provider.GEMINI

    def __init__(
        self,
        timeout_seconds: float = 60.0,
        base_url: str = GEMINI_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            timeout_seconds: Bound on each outbound request
            base_url: API base URL
            transport: Optional httpx transport (used to stub the API in tests)
        """
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    def build_url(self, model: str, api_key: str) -> str:
        return (
            f"{self.base_url}/models/{quote(model, safe='')}:generateContent"
            f"?key={quote(api_key, safe='')}"
        )

    @staticmethod
    def build_body(
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> dict:
        """Build the request body, omitting unset fields entirely."""
        body: dict[str, Any] = {}
        if system_prompt:
            body["systemInstruction"] = {"parts": [{"text": system_prompt}]}
        body["contents"] = [{"role": "user", "parts": [{"text": user_prompt}]}]

        generation_config: dict[str, Any] = {}
        if temperature is not None:
            generation_config["temperature"] = temperature
        if max_output_tokens is not None:
            generation_config["maxOutputTokens"] = max_output_tokens
        body["generationConfig"] = generation_config
        return body

    @staticmethod
    def extract_text(data: Any) -> str:
        """Concatenate the text parts of the first candidate."""
        if not isinstance(data, dict):
            return ""
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and part.get("text")
        )

    def _error_from_response(self, response: httpx.Response) -> ProviderError:
        """Build a ProviderError from a non-success response."""
        try:
            details: Any = response.json()
        except (json.JSONDecodeError, ValueError):
            details = response.text

        message = None
        code = None
        retry_after = parse_retry_after(response.headers.get("retry-after"))

        if isinstance(details, dict):
            error = details.get("error")
            if isinstance(error, dict):
                message = error.get("message")
                code = error.get("status")
                if retry_after is None:
                    retry_after = self._retry_delay_from_details(error.get("details"))
            message = message or details.get("message")

        return ProviderError(
            message or f"Gemini request failed with status {response.status_code}",
            provider=self.provider.value,
            status=response.status_code,
            code=code,
            details=details,
            retry_after=retry_after,
        )

    @staticmethod
    def _retry_delay_from_details(details: Any) -> Optional[float]:
        if not isinstance(details, list):
            return None
        for item in details:
            if isinstance(item, dict) and item.get("@type") == _RETRY_INFO_TYPE:
                return parse_retry_after(item.get("retryDelay"))
        return None

    async def generate(
        self,
        api_key: str,
        model: str,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        url = self.build_url(model, api_key)
        body = self.build_body(system_prompt, user_prompt, temperature, max_output_tokens)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.post(url, json=body)
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"Gemini request timed out after {self.timeout_seconds}s",
                provider=self.provider.value,
                status=504,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Gemini request failed: {e}",
                provider=self.provider.value,
                status=502,
            ) from e

        if not response.is_success:
            raise self._error_from_response(response)

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise ProviderError(
                "Gemini returned a non-JSON response",
                provider=self.provider.value,
                status=502,
                details=response.text,
            ) from e

        return self.extract_text(data)


class OpenAIChatClient(TextGenerationClient):
    """Client for OpenAI chat completions through LiteLLM."""

    provider = Provider.OPENAI

    def __init__(self, timeout_seconds: float = 60.0):
        self.timeout_seconds = timeout_seconds
        # Disable LiteLLM's verbose logging
        litellm.suppress_debug_info = True

    @staticmethod
    def build_messages(system_prompt: Optional[str], user_prompt: str) -> list[dict]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})
        return messages

    def _error_from_exception(self, exc: Exception) -> ProviderError:
        """Convert a LiteLLM/OpenAI exception into a ProviderError."""
        status = getattr(exc, "status_code", None)
        if not isinstance(status, int):
            status = None

        message = getattr(exc, "message", None) or str(exc)
        code = getattr(exc, "code", None)
        if code is not None:
            code = str(code)
        elif OPENAI_QUOTA_EXHAUSTED_CODE in message:
            code = OPENAI_QUOTA_EXHAUSTED_CODE

        retry_after = None
        response = getattr(exc, "response", None)
        headers = getattr(response, "headers", None)
        if headers is not None:
            retry_after = parse_retry_after(headers.get("retry-after"))
        if retry_after is None:
            extra_headers = getattr(exc, "litellm_response_headers", None)
            if extra_headers is not None:
                retry_after = parse_retry_after(extra_headers.get("retry-after"))

        return ProviderError(
            message,
            provider=self.provider.value,
            status=status,
            code=code,
            details=getattr(exc, "body", None),
            retry_after=retry_after,
        )

    async def generate(
        self,
        api_key: str,
        model: str,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> Optional[str]:
        params: dict[str, Any] = {
            "model": f"openai/{model}",
            "messages": self.build_messages(system_prompt, user_prompt),
            "api_key": api_key,
            "timeout": self.timeout_seconds,
        }
        if temperature is not None:
            params["temperature"] = temperature
        if max_output_tokens is not None:
            params["max_tokens"] = max_output_tokens

        try:
            response = await litellm.acompletion(**params)
        except Exception as e:
            raise self._error_from_exception(e) from e

        choices = getattr(response, "choices", None) or []
        if not choices:
            return None
        message = getattr(choices[0], "message", None)
        return getattr(message, "content", None)


def create_client(provider: Provider, timeout_seconds: float = 60.0) -> TextGenerationClient:
    """Create the client for a provider."""
    if provider == Provider.GEMINI:
        return GeminiClient(timeout_seconds=timeout_seconds)
    if provider == Provider.OPENAI:
        return OpenAIChatClient(timeout_seconds=timeout_seconds)
    raise ValueError(f"Unsupported LLM provider: {provider}")


async def generate_text(
    provider: Provider,
    api_key: str,
    model: str,
    system_prompt: Optional[str],
    user_prompt: str,
    temperature: Optional[float] = None,
    max_output_tokens: Optional[int] = None,
    client: Optional[TextGenerationClient] = None,
) -> Optional[str]:
    """Invoke a provider's text-generation endpoint and return plain text.

    Args:
        provider: Provider to call
        api_key: Provider API key
        model: Model id (required)
        system_prompt: Optional system prompt, omitted from the payload when empty
        user_prompt: User prompt (required)
        temperature: Optional sampling temperature
        max_output_tokens: Optional output token cap
        client: Optional pre-built client for the provider

    Returns:
        Generated text. Empty or None means nothing was generated.

    Raises:
        ValueError: If model or user_prompt is empty
        ProviderError: On upstream failure
    """
    if not model:
        raise ValueError("model is required")
    if not user_prompt:
        raise ValueError("user_prompt is required")

    client = client or create_client(provider)
    logger.debug(f"[LLM] Calling {provider.value} | model={model}")
    return await client.generate(
        api_key=api_key,
        model=model,
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        temperature=temperature,
        max_output_tokens=max_output_tokens,
    )
