import os
import sys

from loguru import logger

LOG_LEVEL_ENV_VAR = "WPSTACK_LOG_LEVEL"
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def configure_container_logging(level: str | None = None) -> None:
    """Send loguru output to stderr for in-container entrypoints.

    The container runtime collects stderr, so that is the only sink.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or os.getenv(LOG_LEVEL_ENV_VAR, "INFO")).upper(),
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=False,
    )
