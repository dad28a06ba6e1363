"""
Structured logging for the farmer agent.
Log lines carry the conversation id and keyword context fields.
"""

import logging
import json
from typing import Any
from contextvars import ContextVar

# Conversation id of the request being served (per asyncio task / thread)
conversation_id_ctx: ContextVar[str | None] = ContextVar("conversation_id", default=None)


class StructuredFormatter(logging.Formatter):
    """
    Formats records as single-line JSON objects.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record with structured context.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        conversation_id = conversation_id_ctx.get()
        if conversation_id:
            payload["conversation_id"] = conversation_id

        fields = getattr(record, "fields", None)
        if fields:
            payload.update(fields)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class PlainFormatter(logging.Formatter):
    """Human readable formatter that appends context fields as key=value."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, "fields", None)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


class StructuredLogger:
    """
    Thin wrapper over a stdlib logger accepting context as keyword arguments:

        logger.info("intent_classified", intent="pest", entities=2)
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log(
        self, level: int, event: str, exc_info: bool = False, **fields: Any
    ) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, event, extra={"fields": fields}, exc_info=exc_info)

    def debug(self, event: str, **fields: Any) -> None:
        """Log debug event with context."""
        self._log(logging.DEBUG, event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        """Log info event with context."""
        self._log(logging.INFO, event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        """Log warning event with context."""
        self._log(logging.WARNING, event, **fields)

    def error(self, event: str, exc_info: bool = False, **fields: Any) -> None:
        """
        Log error event with context.

        Args:
            event: Event name
            exc_info: If True, include exception traceback
            **fields: Additional context fields
        """
        self._log(logging.ERROR, event, exc_info=exc_info, **fields)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)


def set_conversation_id(conversation_id: str | None) -> None:
    """Bind a conversation id to the current context."""
    conversation_id_ctx.set(conversation_id)


def get_conversation_id() -> str | None:
    """Return the conversation id bound to the current context, if any."""
    return conversation_id_ctx.get()


def configure_logging(level: str = "INFO", use_structured: bool = True) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_structured: If True, use JSON lines, otherwise plain text
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(log_level)

    if use_structured:
        formatter = StructuredFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    else:
        formatter = PlainFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
