"""Centralized logging configuration with environment variable support."""

import os
import logging
import sys
from typing import Optional, TextIO
from pythonjsonlogger import jsonlogger


JSON_FORMAT = "%(timestamp)s %(levelname)s %(name)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Client libraries that log every HTTP request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "openai", "anthropic", "supabase", "postgrest")


class LoggingConfig:
    """Centralized logging configuration."""

    # Environment variable defaults
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    # "auto" writes text to a terminal and JSON when output is piped or collected
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "auto").lower()
    LOG_MASK_SENSITIVE = os.environ.get("LOG_MASK_SENSITIVE", "true").lower() == "true"
    LOG_RAW_RESPONSE_CHARS = int(os.environ.get("LOG_RAW_RESPONSE_CHARS", "2000"))
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "30000"))

    @classmethod
    def resolve_format(cls, stream: TextIO) -> str:
        """Return "json" or "text" for ``stream``."""
        if cls.LOG_FORMAT in ("json", "text"):
            return cls.LOG_FORMAT
        isatty = getattr(stream, "isatty", None)
        return "text" if isatty is not None and isatty() else "json"

    @classmethod
    def setup_logging(cls, level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
        """Configure the root logger; ``level`` overrides LOG_LEVEL."""
        stream = stream or sys.stdout
        log_level = getattr(logging, (level or cls.LOG_LEVEL).upper(), logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        root_logger.handlers.clear()

        handler = logging.StreamHandler(stream)
        handler.setLevel(log_level)

        if cls.resolve_format(stream) == "json":
            formatter = jsonlogger.JsonFormatter(JSON_FORMAT, timestamp=True)
        else:
            formatter = logging.Formatter(TEXT_FORMAT)

        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
