"""
Structured logging configuration.

Django's ``LOGGING`` dict routes stdlib records through
``structlog.stdlib.ProcessorFormatter`` so that messages emitted by
Django itself and by our own ``structlog`` loggers share one format:
a coloured console line in development, one JSON object per line when
``LOG_JSON=1``.
"""
from __future__ import annotations

import logging.config
from typing import Any

import structlog

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def build_logging_config(level: str = "INFO", json_output: bool = False) -> dict[str, Any]:
    """Return a ``dictConfig`` mapping suitable for ``settings.LOGGING``."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    renderer,
                ],
                "foreign_pre_chain": SHARED_PROCESSORS,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
            },
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {
            "django": {"handlers": ["console"], "level": level, "propagate": False},
            # 4xx responses are already reported by our exception handler
            "django.request": {"handlers": ["console"], "level": "ERROR", "propagate": False},
        },
    }


def configure_structlog(logging_config: dict[str, Any]) -> None:
    """Apply ``logging_config`` and bind structlog to stdlib logging."""
    logging.config.dictConfig(logging_config)
    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)
