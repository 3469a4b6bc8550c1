"""Logging setup shared by the API and the recommendation services."""

import logging
import sys

from cinemood.config import LogLevel, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty libraries only report warnings and above
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def setup_logging(level: LogLevel | None = None) -> None:
    """Configure the root logger once at startup.

    Args:
        level: Explicit level. Falls back to LOG_LEVEL, then INFO in
            production and DEBUG elsewhere.
    """
    settings = get_settings()
    level = level or settings.log_level or ("INFO" if settings.is_production else "DEBUG")

    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext(logging.LoggerAdapter):
    """Logger adapter that prefixes messages with `[key=value]` pairs.

    Example:
        log = LogContext(logger, owner=42)
        log.info("pool refilled")  # "[owner=42] pool refilled"
    """

    def __init__(self, logger: logging.Logger, **context: object) -> None:
        super().__init__(logger, context)
        self.prefix = " ".join(f"[{k}={v}]" for k, v in context.items())

    def process(self, msg, kwargs):
        return f"{self.prefix} {msg}", kwargs
