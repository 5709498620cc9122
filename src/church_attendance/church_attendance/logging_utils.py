from __future__ import annotations

import logging

from .core.constants import DEFAULT_LOG_LEVEL

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure the root logger with a single console handler."""

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("mysql.connector").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    logger.info("Logging configured: level=%s", log_level)
