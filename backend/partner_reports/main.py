"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException

from partner_reports.api.deps import limiter
from partner_reports.api.reports import CORS_HEADERS
from partner_reports.config import get_settings
from partner_reports.llm import create_gateway_from_settings, map_provider_error
from partner_reports.utils.errors import ConfigurationError, ProviderError, ReportServiceError
from partner_reports.utils.logging import setup_logging

# Configure logging with file output
settings = get_settings()
setup_logging(level=settings.log_level, log_dir=settings.log_dir)
logger = logging.getLogger(__name__)


def _warn_missing_keys() -> None:
    """Log a warning for each provider without an API key."""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set. Add OPENAI_API_KEY=sk-... to your .env file.")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set. Add GEMINI_API_KEY=... to your .env file to use Gemini.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    logger.info(f"Starting application in {settings.environment} mode")
    _warn_missing_keys()
    if getattr(app.state, "gateway", None) is None:
        try:
            app.state.gateway = create_gateway_from_settings(settings)
        except ConfigurationError as e:
            # Requests fail with this message until a key is configured
            logger.warning(f"LLM provider not configured: {e.message}")
    yield
    # Shutdown
    logger.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title="Partner Report Generator API",
    description="API for turning guide feedback into polished partner reports",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# Attach rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

class ReportCORSMiddleware(CORSMiddleware):
    """CORS middleware whose preflight answer matches the bare OPTIONS route."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        headers["access-control-allow-methods"] = CORS_HEADERS["Access-Control-Allow-Methods"]
        headers["access-control-allow-headers"] = CORS_HEADERS["Access-Control-Allow-Headers"]
        return Response(status_code=204, headers=headers)


# Configure CORS
app.add_middleware(
    ReportCORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(ReportServiceError)
async def report_service_error_handler(request: Request, exc: ReportServiceError):
    """Convert service failures into the public {error} body."""
    if isinstance(exc, ProviderError):
        normalized = map_provider_error(exc, exc.provider)
        return JSONResponse(status_code=normalized.http_status, content=normalized.to_body())
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies as 400."""
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location + ': ' if location else ''}{first.get('msg', '')}"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors with the same {error} body."""
    detail = exc.detail
    if exc.status_code == 405:
        detail = "Method not allowed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": detail},
        headers=getattr(exc, "headers", None),
    )


# Import and include routers
from partner_reports.api import health, reports  # noqa: E402

app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(reports.router, prefix="/api", tags=["Reports"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Partner Report Generator API",
        "version": "1.0.0",
        "docs": "/docs" if not settings.is_production else None,
    }
