"""Dependency injection for API routes."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from partner_reports.config import get_settings
from partner_reports.llm import ModelGateway, create_gateway_from_settings
from partner_reports.services.report_generator import ReportGeneratorService

logger = logging.getLogger(__name__)
settings = get_settings()

# Rate limiter (in-memory store, single instance)
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)


def get_gateway(request: Request) -> ModelGateway:
    """
    Return the process-wide gateway, building it on first use.

    Raises ConfigurationError if no provider is configured, so a missing key
    surfaces as a request failure rather than a startup crash.
    """
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        gateway = create_gateway_from_settings(get_settings())
        request.app.state.gateway = gateway
    return gateway


def get_report_generator(
    gateway: Annotated[ModelGateway, Depends(get_gateway)],
) -> ReportGeneratorService:
    """Create the report orchestrator for a request."""
    return ReportGeneratorService(gateway)


# Type alias for dependency injection
ReportGenerator = Annotated[ReportGeneratorService, Depends(get_report_generator)]
