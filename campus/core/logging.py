"""Logging configuration."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())

    # SQL echo is controlled by the engine flag
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
