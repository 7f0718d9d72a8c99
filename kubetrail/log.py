"""
Logging setup for Kubetrail.

Log records (discovery failures, stream errors, lifecycle messages) go to
stderr through the ``kubetrail`` logger so they never interleave with the log
lines printed to stdout. The level is taken from ``KUBETRAIL_LOG_LEVEL``.
"""

import logging
import os

from .constants import DEFAULT_LOG_LEVEL, ENV_LOG_LEVEL, LOG_FORMAT, LOGGER_NAME

log = logging.getLogger(LOGGER_NAME)


def configure_logging() -> None:
    """Configure root logging (level via KUBETRAIL_LOG_LEVEL env or default INFO)."""
    logging.basicConfig(
        level=getattr(logging, os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
    )


# Helper for safe exception logging
def log_exception(msg: str, exc: BaseException, level: int = logging.WARNING) -> None:
    """Log an exception with proper formatting."""
    log.log(level, f"{msg}: {exc.__class__.__name__}: {exc}")
