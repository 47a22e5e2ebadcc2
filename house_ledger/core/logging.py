"""Logging setup"""

import logging


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler and quiet noisy libraries."""
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # SQL echo is controlled by settings.debug, not the log level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
