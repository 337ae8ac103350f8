"""
Process startup tasks.

Handles initialization that should run once before pipelines are built:
- Logging configuration
- Settings summary
"""
import logging
from typing import Optional

from apparel_pipeline.core.config import settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for the pipeline.

    Args:
        level: Log level name (defaults to settings.LOG_LEVEL)
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def run_startup_tasks(level: Optional[str] = None) -> None:
    """Configure logging and report the active settings."""
    configure_logging(level)

    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}")
    logger.info(
        f"timeout={settings.SERVICE_TIMEOUT_SECONDS}s, "
        f"workers={settings.MAX_CANDIDATE_WORKERS}, "
        f"background_threshold={settings.BACKGROUND_THRESHOLD}"
    )
    logger.info("=" * 60)
