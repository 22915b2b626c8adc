"""Logging setup for the service process."""

import logging

from otp_auth.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once at startup."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        force=True,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
