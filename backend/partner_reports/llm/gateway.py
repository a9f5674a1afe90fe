"""LLM gateway tying provider configuration, clients and retry together.

The gateway is built once per process from the resolved ProviderConfig and
shared read-only across requests.
"""

import logging
from typing import Awaitable, Callable, Optional

from .config import TASK_PARAMS, ProviderConfig, TaskType
from .providers import TextGenerationClient, create_client, generate_text
from .retry import RetryConfig, RetryStrategy

logger = logging.getLogger(__name__)


class ModelGateway:
    """Single entry point for text generation.

    Routes each task to its configured model and sampling parameters, and
    wraps the provider call in the retry policy where it applies.
    """

    def __init__(
        self,
        config: ProviderConfig,
        client: Optional[TextGenerationClient] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """Initialize the gateway.

        Args:
            config: Resolved provider configuration
            client: Optional client override (defaults to the provider's client)
            sleep: Optional async sleep used between retries
        """
        self.config = config
        self.client = client or create_client(config.provider, config.timeout_seconds)
        self.retry_strategy = RetryStrategy(
            RetryConfig(max_retries=config.max_retries),
            sleep=sleep,
        )

        logger.info(
            f"ModelGateway initialized | provider={config.provider.value} | "
            f"retry={'on' if config.uses_retry else 'off'} | "
            f"max_retries={config.max_retries}"
        )

    @property
    def provider_name(self) -> str:
        return self.config.provider.value

    def model_for(self, task: TaskType) -> str:
        return self.config.model_for(task)

    async def generate_text(
        self,
        task: TaskType,
        user_prompt: str,
        system_prompt: Optional[str] = None,
    ) -> Optional[str]:
        """Generate text for a task.

        Args:
            task: Type of task (determines model and sampling params)
            user_prompt: User prompt
            system_prompt: Optional system prompt

        Returns:
            Generated text, or None/empty when the provider returned nothing

        Raises:
            ProviderError: If the provider call fails (after retries, if any)
        """
        model = self.model_for(task)
        params = TASK_PARAMS[task]

        async def make_request() -> Optional[str]:
            return await generate_text(
                provider=self.config.provider,
                api_key=self.config.api_key,
                model=model,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                temperature=params.temperature,
                max_output_tokens=params.max_output_tokens,
                client=self.client,
            )

        if self.config.uses_retry:
            text = await self.retry_strategy.execute_with_retry(make_request)
        else:
            text = await make_request()

        logger.info(
            f"[LLM] Generated text | task={task.value} | provider={self.provider_name} | "
            f"model={model} | chars={len(text or '')}"
        )
        return text


def create_gateway_from_settings(settings=None) -> ModelGateway:
    """Create a ModelGateway from application settings.

    Raises:
        ConfigurationError: If no provider is configured
    """
    # Import here to avoid circular imports
    from partner_reports.config import get_settings

    from .config import resolve_provider_config

    return ModelGateway(resolve_provider_config(settings or get_settings()))
