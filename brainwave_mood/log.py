"""Logging helpers for the Brainwave Mood service."""

import logging
import re
from collections.abc import Iterable

LOGGER_NAME = "brainwave_mood"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class SensitiveDataFilter(logging.Filter):
    """Mask bearer tokens and API keys in log messages and arguments."""

    _PATTERNS: Iterable[tuple[re.Pattern[str], str]] = (
        (re.compile(r"Bearer\s+[A-Za-z0-9._~+/=-]+"), "Bearer ***"),
        (re.compile(r"(authorization[=:]\s*)(?!Bearer\b)([^\s,]+)", re.I), r"\1***"),
        (re.compile(r"(api[_-]?key=)([^&\s]+)", re.I), r"\1***"),
        (re.compile(r"(access[_-]?token=)([^&\s]+)", re.I), r"\1***"),
    )

    def __init__(self) -> None:
        super().__init__(name="SensitiveDataFilter")

    @classmethod
    def sanitize(cls, value: object) -> object:
        if isinstance(value, str):
            sanitized = value
            for pattern, repl in cls._PATTERNS:
                sanitized = pattern.sub(repl, sanitized)
            return sanitized
        if isinstance(value, (list, tuple)):
            return type(value)(cls.sanitize(v) for v in value)
        if isinstance(value, dict):
            return {k: cls.sanitize(v) for k, v in value.items()}
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.sanitize(record.msg)
        if record.args:
            record.args = self.sanitize(record.args)
        return True


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Attach a filtered stream handler to the package logger.

    Calling this more than once replaces the previously installed handler
    instead of stacking duplicates.

    Args:
        level: Log level name or number

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    for handler in list(logger.handlers):
        if getattr(handler, "_brainwave_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(SensitiveDataFilter())
    handler._brainwave_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
