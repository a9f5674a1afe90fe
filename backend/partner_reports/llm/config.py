"""LLM configuration and provider selection.

This module defines the supported providers, task types with their sampling
parameters, and the per-process provider configuration resolved from
application settings.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from partner_reports.utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Provider(Enum):
    """Supported LLM providers."""

    OPENAI = "openai"  # Chat completions, via LiteLLM
    GEMINI = "gemini"  # generateContent REST API


class TaskType(Enum):
    """Types of LLM tasks with different model requirements."""

    REPORT = "report"  # Partner report text (high quality)
    ANALYSIS = "analysis"  # Structured feedback analysis (cheap, fast)


@dataclass(frozen=True)
class GenerationParams:
    """Sampling parameters for a task."""

    temperature: float
    max_output_tokens: int


TASK_PARAMS: dict[TaskType, GenerationParams] = {
    TaskType.REPORT: GenerationParams(temperature=0.7, max_output_tokens=1500),
    TaskType.ANALYSIS: GenerationParams(temperature=0.3, max_output_tokens=300),
}

# Default model per provider and task, overridable from settings
DEFAULT_MODELS: dict[Provider, dict[TaskType, str]] = {
    Provider.OPENAI: {
        TaskType.REPORT: "gpt-4o",
        TaskType.ANALYSIS: "gpt-4o-mini",
    },
    Provider.GEMINI: {
        TaskType.REPORT: "gemini-2.5-flash",
        TaskType.ANALYSIS: "gemini-2.5-flash-lite",
    },
}

API_KEY_ENV_VARS: dict[Provider, str] = {
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.GEMINI: "GEMINI_API_KEY",
}

UNCONFIGURED_MESSAGE = (
    "No AI provider configured. Set GEMINI_API_KEY (recommended) or "
    "OPENAI_API_KEY in your .env file."
)


@dataclass(frozen=True)
class ProviderConfig:
    """Provider, models and credentials used for every request."""

    provider: Provider
    report_model: str
    analysis_model: str
    api_key: str

    # Retry configuration
    max_retries: int = 2

    # Timeout configuration
    timeout_seconds: float = 60.0

    # Apply the retry policy to every provider, not only chat completions
    retry_all_providers: bool = False

    def model_for(self, task: TaskType) -> str:
        """Get the model id used for a task."""
        if task == TaskType.ANALYSIS:
            return self.analysis_model
        return self.report_model

    @property
    def uses_retry(self) -> bool:
        """Whether calls to this provider go through the retry policy."""
        return self.provider == Provider.OPENAI or self.retry_all_providers


def select_provider(
    override: Optional[str],
    gemini_api_key: Optional[str],
    openai_api_key: Optional[str],
) -> Optional[Provider]:
    """Pick the provider to use.

    Precedence: explicit override, then a Gemini key, then an OpenAI key.

    Raises:
        ConfigurationError: If the override names an unknown provider
    """
    if override:
        name = override.strip().lower()
        try:
            return Provider(name)
        except ValueError:
            raise ConfigurationError(
                f"Unsupported AI_PROVIDER '{override}'. Use 'gemini' or 'openai'."
            ) from None
    if gemini_api_key:
        return Provider.GEMINI
    if openai_api_key:
        return Provider.OPENAI
    return None


def resolve_provider_config(settings) -> ProviderConfig:
    """Build the ProviderConfig from application settings.

    Args:
        settings: Application Settings instance

    Returns:
        Resolved ProviderConfig

    Raises:
        ConfigurationError: If no provider has credentials
    """
    provider = select_provider(
        settings.ai_provider,
        settings.gemini_api_key,
        settings.openai_api_key,
    )
    if provider is None:
        raise ConfigurationError(UNCONFIGURED_MESSAGE)

    if provider == Provider.GEMINI:
        api_key = settings.gemini_api_key
        report_model = settings.gemini_report_model
        analysis_model = settings.gemini_analysis_model
    else:
        api_key = settings.openai_api_key
        report_model = settings.openai_report_model
        analysis_model = settings.openai_analysis_model

    if not api_key:
        raise ConfigurationError(
            f"AI_PROVIDER is set to '{provider.value}' but "
            f"{API_KEY_ENV_VARS[provider]} is not set."
        )

    config = ProviderConfig(
        provider=provider,
        report_model=report_model or DEFAULT_MODELS[provider][TaskType.REPORT],
        analysis_model=analysis_model or DEFAULT_MODELS[provider][TaskType.ANALYSIS],
        api_key=api_key,
        max_retries=settings.openai_max_retries,
        timeout_seconds=settings.llm_timeout_seconds,
        retry_all_providers=settings.llm_retry_all_providers,
    )
    logger.info(
        f"[LLM] Provider resolved | provider={provider.value} | "
        f"report_model={config.report_model} | analysis_model={config.analysis_model}"
    )
    return config
