"""
Logging setup for the API process.
"""
import logging
import sys
from typing import Optional

from app.core.config import settings

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once, from LOG_LEVEL unless overridden."""
    global _configured
    if _configured:
        return

    numeric_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    # Avoid duplicate lines when uvicorn already attached handlers
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    # SQL echo is controlled by DEBUG on the engine; keep its logger quieter
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    _configured = True
