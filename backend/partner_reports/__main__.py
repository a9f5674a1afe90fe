"""Run the API server with uvicorn."""

import uvicorn

from partner_reports.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "partner_reports.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=not settings.is_production,
    )


if __name__ == "__main__":
    main()
