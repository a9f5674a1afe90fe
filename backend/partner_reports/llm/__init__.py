"""LLM subsystem for provider-independent text generation.

This module provides a unified interface for the supported LLM providers with:
- Provider selection from configuration (OpenAI or Gemini)
- Task-based model and sampling parameter routing
- Retry with exponential backoff honoring retry-after hints
- Normalization of provider failures into HTTP statuses and messages

Example usage:
    from partner_reports.llm import ModelGateway, TaskType, resolve_provider_config

    gateway = ModelGateway(resolve_provider_config(settings))

    text = await gateway.generate_text(
        task=TaskType.REPORT,
        system_prompt="You are ...",
        user_prompt="Transform this feedback ...",
    )
"""

from .config import (
    DEFAULT_MODELS,
    TASK_PARAMS,
    GenerationParams,
    Provider,
    ProviderConfig,
    TaskType,
    resolve_provider_config,
    select_provider,
)
from .error_mapping import NormalizedError, map_provider_error
from .gateway import ModelGateway, create_gateway_from_settings
from .providers import (
    GeminiClient,
    OpenAIChatClient,
    TextGenerationClient,
    generate_text,
)
from .retry import RetryConfig, RetryStrategy, is_retryable_error

__all__ = [
    # Config
    "Provider",
    "ProviderConfig",
    "TaskType",
    "GenerationParams",
    "DEFAULT_MODELS",
    "TASK_PARAMS",
    "resolve_provider_config",
    "select_provider",
    # Gateway
    "ModelGateway",
    "create_gateway_from_settings",
    # Providers
    "TextGenerationClient",
    "GeminiClient",
    "OpenAIChatClient",
    "generate_text",
    # Retry
    "RetryConfig",
    "RetryStrategy",
    "is_retryable_error",
    # Errors
    "NormalizedError",
    "map_provider_error",
]
