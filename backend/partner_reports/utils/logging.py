"""Logging configuration with file and console output."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Loggers whose output also goes to reports.log
REPORT_LOGGERS = (
    "partner_reports.services.report_generator",
    "partner_reports.llm.gateway",
    "partner_reports.llm.retry",
)


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Configure application logging with both console and file output.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (defaults to $LOG_DIR or ./logs)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_dir is None:
        log_dir = os.environ.get("LOG_DIR", "logs")

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    # Console handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Main application log and errors-only log
    root_logger.addHandler(_rotating_handler(log_path / "app.log", log_level, formatter))
    root_logger.addHandler(_rotating_handler(log_path / "error.log", logging.ERROR, formatter))

    # Report generation specific log
    report_handler = _rotating_handler(log_path / "reports.log", log_level, formatter)
    for name in REPORT_LOGGERS:
        report_logger = logging.getLogger(name)
        for existing in list(report_logger.handlers):
            if isinstance(existing, RotatingFileHandler):
                report_logger.removeHandler(existing)
                existing.close()
        report_logger.addHandler(report_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("watchfiles").setLevel(logging.WARNING)

    root_logger.info(f"Logging initialized - Level: {level}, Log directory: {log_path.absolute()}")
