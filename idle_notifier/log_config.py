"""Structured logging setup with phone number redaction."""

import logging
import re

import structlog

# E.164 numbers, e.g. +14155550123
NUMBER_PATTERN = re.compile(r"\+[1-9]\d{5,14}")


def redact_number(text: str) -> str:
    """Redact phone numbers from text, keeping the last two digits."""
    return NUMBER_PATTERN.sub(lambda m: "[REDACTED_NUMBER]" + m.group(0)[-2:], text)


def setup_logging(debug: bool = False) -> None:
    """Configure structlog for JSON output."""
    log_level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Also configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        level=log_level,
    )
