"""Shared fixtures for the partner report tests."""

import os
import tempfile

# Must be set before the app modules read settings
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="partner-reports-logs-"))
for _key in ("AI_PROVIDER", "OPENAI_API_KEY", "GEMINI_API_KEY"):
    os.environ.pop(_key, None)

import pytest  # noqa: E402

from partner_reports.llm import ModelGateway, Provider, ProviderConfig  # noqa: E402
from partner_reports.llm.providers import TextGenerationClient  # noqa: E402
from partner_reports.utils.errors import ProviderError  # noqa: E402


class FakeClient(TextGenerationClient):
    """Provider client returning scripted outputs.

    Each scripted item is returned in order; exceptions are raised. Once the
    script runs out the last item repeats.
    """

    def __init__(self, outputs, provider: Provider = Provider.OPENAI):
        self.outputs = list(outputs)
        self.provider = provider
        self.calls: list[dict] = []

    async def generate(
        self,
        api_key,
        model,
        system_prompt,
        user_prompt,
        temperature=None,
        max_output_tokens=None,
    ):
        self.calls.append(
            {
                "api_key": api_key,
                "model": model,
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        index = min(len(self.calls) - 1, len(self.outputs) - 1)
        output = self.outputs[index]
        if isinstance(output, BaseException):
            raise output
        return output


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(float(seconds))


def provider_error(status, code=None, retry_after=None, provider="openai") -> ProviderError:
    return ProviderError(
        f"upstream failed with {status}",
        provider=provider,
        status=status,
        code=code,
        retry_after=retry_after,
    )


VALID_ANALYSIS_JSON = (
    '{"foodIssues": true, "customerBehavior": "Upset about lunch", '
    '"expectationMismatch": "Expected a full buffet", '
    '"guideResponse": "Offered an extra snack"}'
)


@pytest.fixture
def openai_config() -> ProviderConfig:
    return ProviderConfig(
        provider=Provider.OPENAI,
        report_model="gpt-4o",
        analysis_model="gpt-4o-mini",
        api_key="sk-test",
        max_retries=2,
    )


@pytest.fixture
def gemini_config() -> ProviderConfig:
    return ProviderConfig(
        provider=Provider.GEMINI,
        report_model="gemini-2.5-flash",
        analysis_model="gemini-2.5-flash-lite",
        api_key="gemini-test",
        max_retries=2,
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_gateway(recording_sleep):
    """Build a gateway around a FakeClient with scripted outputs."""

    def _make(config: ProviderConfig, outputs):
        client = FakeClient(outputs, provider=config.provider)
        gateway = ModelGateway(config, client=client, sleep=recording_sleep)
        return gateway, client

    return _make
