"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from partner_reports.models.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint for monitoring."""
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))
