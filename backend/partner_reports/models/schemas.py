"""Pydantic schemas for request/response validation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON with snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================
# Report Schemas
# ============================================


class GenerateReportRequest(CamelModel):
    """Guide feedback to turn into a partner report."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    raw_feedback: str | None = None
    customer_name: str | None = None
    booking_reference: str | None = None
    platform: str | None = None
    tour_name: str | None = None
    guide_remarks: str | None = None
    meal_type: str | None = None
    tone: str | None = None


class AnalysisResult(CamelModel):
    """Structured analysis of the raw feedback."""

    food_issues: bool
    customer_behavior: str
    expectation_mismatch: str
    guide_response: str

    @classmethod
    def unavailable(cls) -> "AnalysisResult":
        """Sentinel used when the analysis step fails."""
        return cls(
            food_issues=False,
            customer_behavior="Unable to analyze",
            expectation_mismatch="Unable to analyze",
            guide_response="Unable to analyze",
        )


class ReportMetadata(CamelModel):
    """How the report was produced."""

    platform: str
    tone: str
    provider: str
    model: str
    generated_at: datetime


class GenerationResult(CamelModel):
    """Generated partner report with its analysis."""

    report: str
    analysis: AnalysisResult
    metadata: ReportMetadata


# ============================================
# Common Schemas
# ============================================


class ErrorResponse(CamelModel):
    """Error body returned by every failing endpoint."""

    error: str
    retry_after_seconds: float | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
