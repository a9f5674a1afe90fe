"""Tests for the provider client adapters.

The Gemini REST endpoint is stubbed with httpx.MockTransport and the OpenAI
path by monkeypatching litellm.acompletion, so no network access is needed.

Run with: pytest tests/test_providers.py -v
"""

import json
from types import SimpleNamespace

import httpx
import litellm
import pytest

from partner_reports.llm import Provider, generate_text
from partner_reports.llm.providers import (
    GeminiClient,
    OpenAIChatClient,
    parse_retry_after,
)
from partner_reports.utils.errors import ProviderError


def gemini_client(handler) -> GeminiClient:
    return GeminiClient(timeout_seconds=5, transport=httpx.MockTransport(handler))


def gemini_success(*texts) -> dict:
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": t} for t in texts]}}
        ]
    }


# ============================================
# Retry-after parsing
# ============================================


class TestParseRetryAfter:
    """Test retry hint parsing."""

    def test_numeric_string(self):
        assert parse_retry_after("5") == 5.0

    def test_duration_string(self):
        assert parse_retry_after("39s") == 39.0
        assert parse_retry_after("1.5s") == 1.5

    def test_number(self):
        assert parse_retry_after(2) == 2.0

    def test_invalid_values(self):
        assert parse_retry_after(None) is None
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") is None
        assert parse_retry_after("-3") is None

    def test_non_finite_values(self):
        assert parse_retry_after("inf") is None
        assert parse_retry_after("nan") is None
        assert parse_retry_after("Infinity") is None
        assert parse_retry_after(float("inf")) is None


# ============================================
# Gemini
# ============================================


class TestGeminiRequest:
    """Test the Gemini wire format."""

    @pytest.mark.asyncio
    async def test_posts_to_model_endpoint_with_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["key"] = request.url.params.get("key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_success("Hello"))

        text = await gemini_client(handler).generate(
            api_key="my key",
            model="gemini-2.5-flash",
            system_prompt="Be formal",
            user_prompt="Write it",
            temperature=0.7,
            max_output_tokens=1500,
        )

        assert text == "Hello"
        assert seen["method"] == "POST"
        assert seen["path"] == "/v1beta/models/gemini-2.5-flash:generateContent"
        assert seen["key"] == "my key"
        assert seen["body"] == {
            "systemInstruction": {"parts": [{"text": "Be formal"}]},
            "contents": [{"role": "user", "parts": [{"text": "Write it"}]}],
            "generationConfig": {"temperature": 0.7, "maxOutputTokens": 1500},
        }

    def test_empty_system_prompt_is_omitted(self):
        body = GeminiClient.build_body("", "Analyze", temperature=0.3)
        assert "systemInstruction" not in body
        assert body["generationConfig"] == {"temperature": 0.3}

    def test_unset_sampling_params_are_omitted(self):
        body = GeminiClient.build_body(None, "Analyze")
        assert body["generationConfig"] == {}

    def test_model_is_url_encoded(self):
        url = GeminiClient().build_url("models/odd name", "k")
        assert "models%2Fodd%20name:generateContent" in url


class TestGeminiResponse:
    """Test Gemini response handling."""

    @pytest.mark.asyncio
    async def test_concatenates_text_parts(self):
        def handler(request):
            return httpx.Response(200, json=gemini_success("Dear ", "Partner", ""))

        text = await gemini_client(handler).generate("k", "m", None, "u")
        assert text == "Dear Partner"

    @pytest.mark.asyncio
    async def test_no_candidates_returns_empty_string(self):
        def handler(request):
            return httpx.Response(200, json={"candidates": []})

        assert await gemini_client(handler).generate("k", "m", None, "u") == ""

    def test_extract_text_ignores_non_text_parts(self):
        data = {"candidates": [{"content": {"parts": [{"inlineData": {}}, {"text": "ok"}]}}]}
        assert GeminiClient.extract_text(data) == "ok"


class TestGeminiErrors:
    """Test Gemini failure handling."""

    @pytest.mark.asyncio
    async def test_json_error_body(self):
        def handler(request):
            return httpx.Response(
                403,
                json={"error": {"code": 403, "message": "API not enabled", "status": "PERMISSION_DENIED"}},
            )

        with pytest.raises(ProviderError) as exc_info:
            await gemini_client(handler).generate("k", "m", None, "u")

        error = exc_info.value
        assert error.provider == "gemini"
        assert error.status == 403
        assert error.code == "PERMISSION_DENIED"
        assert error.message == "API not enabled"
        assert error.details["error"]["code"] == 403

    @pytest.mark.asyncio
    async def test_text_error_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(ProviderError) as exc_info:
            await gemini_client(handler).generate("k", "m", None, "u")

        assert exc_info.value.status == 502
        assert exc_info.value.details == "Bad Gateway"
        assert exc_info.value.message == "Gemini request failed with status 502"

    @pytest.mark.asyncio
    async def test_retry_info_detail(self):
        def handler(request):
            return httpx.Response(
                429,
                json={
                    "error": {
                        "code": 429,
                        "message": "Quota exceeded",
                        "status": "RESOURCE_EXHAUSTED",
                        "details": [
                            {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": "39s"}
                        ],
                    }
                },
            )

        with pytest.raises(ProviderError) as exc_info:
            await gemini_client(handler).generate("k", "m", None, "u")

        assert exc_info.value.status == 429
        assert exc_info.value.retry_after == 39.0

    @pytest.mark.asyncio
    async def test_retry_after_header(self):
        def handler(request):
            return httpx.Response(503, headers={"Retry-After": "4"}, json={"message": "busy"})

        with pytest.raises(ProviderError) as exc_info:
            await gemini_client(handler).generate("k", "m", None, "u")

        assert exc_info.value.retry_after == 4.0
        assert exc_info.value.message == "busy"

    @pytest.mark.asyncio
    async def test_infinite_retry_after_header_is_ignored(self):
        def handler(request):
            return httpx.Response(429, headers={"Retry-After": "inf"}, json={"message": "slow down"})

        with pytest.raises(ProviderError) as exc_info:
            await gemini_client(handler).generate("k", "m", None, "u")

        assert exc_info.value.status == 429
        assert exc_info.value.retry_after is None

    @pytest.mark.asyncio
    async def test_timeout_becomes_504(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await gemini_client(handler).generate("k", "m", None, "u")

        assert exc_info.value.status == 504

    @pytest.mark.asyncio
    async def test_connection_error_becomes_502(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await gemini_client(handler).generate("k", "m", None, "u")

        assert exc_info.value.status == 502


# ============================================
# OpenAI (via LiteLLM)
# ============================================


class FakeLiteLLMError(Exception):
    """Mimics the attributes LiteLLM exceptions expose."""

    def __init__(self, message, status_code, code=None, headers=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.response = SimpleNamespace(headers=httpx.Headers(headers or {}))


def chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestOpenAIChatClient:
    """Test the chat-completion adapter."""

    @pytest.mark.asyncio
    async def test_sends_system_and_user_messages(self, monkeypatch):
        captured = {}

        async def fake_acompletion(**kwargs):
            captured.update(kwargs)
            return chat_response("Dear Viator Partner Support")

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)

        text = await OpenAIChatClient(timeout_seconds=10).generate(
            api_key="sk-test",
            model="gpt-4o",
            system_prompt="sys",
            user_prompt="user",
            temperature=0.7,
            max_output_tokens=1500,
        )

        assert text == "Dear Viator Partner Support"
        assert captured["model"] == "openai/gpt-4o"
        assert captured["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "user"},
        ]
        assert captured["api_key"] == "sk-test"
        assert captured["temperature"] == 0.7
        assert captured["max_tokens"] == 1500
        assert captured["timeout"] == 10

    @pytest.mark.asyncio
    async def test_user_only_message_without_system_prompt(self, monkeypatch):
        captured = {}

        async def fake_acompletion(**kwargs):
            captured.update(kwargs)
            return chat_response("{}")

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)

        await OpenAIChatClient().generate("sk", "gpt-4o-mini", None, "analyze")

        assert captured["messages"] == [{"role": "user", "content": "analyze"}]
        assert "temperature" not in captured
        assert "max_tokens" not in captured

    @pytest.mark.asyncio
    async def test_missing_choice_returns_none(self, monkeypatch):
        async def fake_acompletion(**kwargs):
            return SimpleNamespace(choices=[])

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)

        assert await OpenAIChatClient().generate("sk", "gpt-4o", None, "u") is None

    @pytest.mark.asyncio
    async def test_rate_limit_error_is_converted(self, monkeypatch):
        async def fake_acompletion(**kwargs):
            raise FakeLiteLLMError("Rate limit reached", 429, headers={"retry-after": "5"})

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)

        with pytest.raises(ProviderError) as exc_info:
            await OpenAIChatClient().generate("sk", "gpt-4o", None, "u")

        error = exc_info.value
        assert error.provider == "openai"
        assert error.status == 429
        assert error.code is None
        assert error.retry_after == 5.0
        assert isinstance(error.__cause__, FakeLiteLLMError)

    @pytest.mark.asyncio
    async def test_quota_code_detected_from_message(self, monkeypatch):
        async def fake_acompletion(**kwargs):
            raise FakeLiteLLMError(
                "OpenAIException - You exceeded your current quota. 'code': 'insufficient_quota'",
                429,
            )

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)

        with pytest.raises(ProviderError) as exc_info:
            await OpenAIChatClient().generate("sk", "gpt-4o", None, "u")

        assert exc_info.value.code == "insufficient_quota"

    @pytest.mark.asyncio
    async def test_exception_without_status(self, monkeypatch):
        async def fake_acompletion(**kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)

        with pytest.raises(ProviderError) as exc_info:
            await OpenAIChatClient().generate("sk", "gpt-4o", None, "u")

        assert exc_info.value.status is None
        assert exc_info.value.message == "boom"


# ============================================
# generate_text
# ============================================


class TestGenerateText:
    """Test the provider-independent entry point."""

    @pytest.mark.asyncio
    async def test_requires_model(self):
        with pytest.raises(ValueError):
            await generate_text(Provider.OPENAI, "sk", "", None, "prompt")

    @pytest.mark.asyncio
    async def test_requires_user_prompt(self):
        with pytest.raises(ValueError):
            await generate_text(Provider.GEMINI, "k", "gemini-2.5-flash", "sys", "")

    @pytest.mark.asyncio
    async def test_dispatches_to_given_client(self):
        def handler(request):
            return httpx.Response(200, json=gemini_success("From Gemini"))

        text = await generate_text(
            Provider.GEMINI,
            "k",
            "gemini-2.5-flash",
            None,
            "prompt",
            temperature=0.3,
            max_output_tokens=300,
            client=gemini_client(handler),
        )
        assert text == "From Gemini"
