"""Report generation orchestration service."""

import logging
import re
import time
from datetime import datetime, timezone

from partner_reports.llm import ModelGateway, TaskType
from partner_reports.models.schemas import (
    AnalysisResult,
    GenerateReportRequest,
    GenerationResult,
    ReportMetadata,
)
from partner_reports.utils.errors import (
    InvalidRequestError,
    LLMGenerationError,
    ProviderError,
)

from .profiles import resolve_platform, resolve_tone
from .prompts import build_analysis_prompt, build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?[ \t]*\n?|\n?```")


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences wrapping a JSON payload."""
    return _CODE_FENCE.sub("", text).strip()


def parse_analysis(text: str | None) -> AnalysisResult:
    """Parse the analysis model output.

    Raises:
        ValueError: If the text is empty, not JSON, or misses required fields
    """
    if not text or not text.strip():
        raise ValueError("Empty analysis response")
    return AnalysisResult.model_validate_json(strip_code_fences(text))


class ReportGeneratorService:
    """Orchestrates partner report generation.

    Phase one produces the report text and must succeed. Phase two extracts
    a structured analysis and falls back to a sentinel on any failure.
    """

    def __init__(self, gateway: ModelGateway):
        """Initialize with a configured LLM gateway."""
        self.gateway = gateway

    async def generate(self, request: GenerateReportRequest) -> GenerationResult:
        """
        Generate a partner report and feedback analysis.

        Args:
            request: Validated inbound request

        Returns:
            GenerationResult with report text, analysis and metadata

        Raises:
            InvalidRequestError: If raw feedback is missing
            ProviderError: If the provider call for the report fails
            LLMGenerationError: If the provider returned no report text
        """
        if not request.raw_feedback or not request.raw_feedback.strip():
            raise InvalidRequestError("Raw feedback is required")

        start_time = time.time()
        platform = resolve_platform(request.platform)
        tone = resolve_tone(request.tone)
        provider = self.gateway.provider_name
        report_model = self.gateway.model_for(TaskType.REPORT)

        logger.info(
            f"[REPORT] Generating | provider={provider} | model={report_model} | "
            f"platform={platform.display_name} | tone={tone.display_name}"
        )

        try:
            report_text = await self.gateway.generate_text(
                task=TaskType.REPORT,
                system_prompt=build_system_prompt(platform, tone),
                user_prompt=build_user_prompt(request, platform, tone),
            )
        except ProviderError as e:
            logger.error(
                f"[REPORT] Report generation failed | provider={e.provider} | "
                f"status={e.status} | code={e.code} | error={e.message}"
            )
            raise

        if not report_text or not report_text.strip():
            logger.error(f"[REPORT] Provider returned no report text | provider={provider}")
            raise LLMGenerationError("Failed to generate report")

        analysis = await self._analyze(request.raw_feedback)

        result = GenerationResult(
            report=report_text,
            analysis=analysis,
            metadata=ReportMetadata(
                platform=platform.display_name,
                tone=tone.display_name,
                provider=provider,
                model=report_model,
                generated_at=datetime.now(timezone.utc),
            ),
        )

        logger.info(
            f"[REPORT] Completed | chars={len(report_text)} | "
            f"duration={time.time() - start_time:.2f}s"
        )
        return result

    async def _analyze(self, raw_feedback: str) -> AnalysisResult:
        """Run the best-effort analysis step. Never raises."""
        try:
            text = await self.gateway.generate_text(
                task=TaskType.ANALYSIS,
                user_prompt=build_analysis_prompt(raw_feedback),
            )
            return parse_analysis(text)
        except ValueError as e:
            logger.warning(f"[REPORT] Analysis output unusable, using fallback: {e}")
        except Exception as e:
            logger.warning(
                f"[REPORT] Analysis call failed, using fallback: {type(e).__name__}: {e}"
            )
        return AnalysisResult.unavailable()
