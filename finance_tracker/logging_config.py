"""
Logging setup.

Modules log through logging.getLogger(__name__). This module
only configures the root logger once, when the app starts.
"""

import logging

from finance_tracker.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger from settings (or an explicit level)."""
    settings = get_settings()
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format=LOG_FORMAT,
    )
    # SQL echo is only useful while debugging queries locally
    if settings.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
