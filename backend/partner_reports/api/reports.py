"""Report generation routes."""

import logging

from fastapi import APIRouter, Request, Response, status

from partner_reports.api.deps import ReportGenerator, limiter
from partner_reports.config import get_settings
from partner_reports.models.schemas import (
    ErrorResponse,
    GenerateReportRequest,
    GenerationResult,
)
from partner_reports.utils.errors import method_not_allowed

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (400, 401, 403, 404, 429, 500)
}


@router.post(
    "/generate-report",
    response_model=GenerationResult,
    responses=_ERROR_RESPONSES,
)
@limiter.limit(settings.generate_rate_limit)
async def generate_report(
    request: Request,
    payload: GenerateReportRequest,
    generator: ReportGenerator,
):
    """Turn raw guide feedback into a partner report plus analysis."""
    logger.info(
        f"[REPORT] Request received | platform={payload.platform} | tone={payload.tone}"
    )
    return await generator.generate(payload)


@router.options("/generate-report", status_code=status.HTTP_204_NO_CONTENT)
async def generate_report_options():
    """Answer CORS preflight for clients that send a bare OPTIONS."""
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)


@router.api_route(
    "/generate-report",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def generate_report_method_not_allowed():
    """Reject every method other than POST and OPTIONS."""
    raise method_not_allowed()
