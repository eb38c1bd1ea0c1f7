"""Structured logging configuration using structlog.

Provider events (retries, context window fallbacks, token count fallbacks)
are emitted as keyword fields, so JSON output in production keeps them
queryable. Development gets the pretty console renderer.

Credentials never reach a handler: `mask_secrets` runs on every event,
including stdlib records from httpx.
"""

import logging
import re
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from llm_resilience.config import settings


SECRET_FIELDS = frozenset({"api_key", "openai_api_key", "authorization"})

# OpenAI keys (sk-..., sk-proj-...) and bearer tokens inside free text
_SECRET_PATTERN = re.compile(r"(Bearer\s+|\bsk-)[A-Za-z0-9_\-]{4,}")

# Loggers of libraries that only add request-level noise next to provider events
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "asyncio")


def _mask(value: Any) -> Any:
    if isinstance(value, str):
        return _SECRET_PATTERN.sub(lambda m: f"{m.group(1)}***", value)
    return value


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the emitting application."""
    event_dict["app"] = "llm-resilience"
    return event_dict


def mask_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact credential fields and API keys embedded in string values."""
    for key, value in event_dict.items():
        if key.lower() in SECRET_FIELDS:
            event_dict[key] = "***"
        else:
            event_dict[key] = _mask(value)
    return event_dict


def _renderer(is_production: bool) -> tuple[list[Processor], Processor]:
    """Exception formatting processors and the final renderer for the environment."""
    if is_production:
        return [structlog.processors.format_exc_info], structlog.processors.JSONRenderer()
    return [structlog.processors.ExceptionPrettyPrinter()], structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(
    log_level: Optional[str] = None,
    environment: Optional[str] = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level name, defaults to settings.LOG_LEVEL
        environment: "production" selects JSON output, anything else the
            console renderer. Defaults to settings.ENVIRONMENT
    """
    log_level = log_level or settings.LOG_LEVEL
    environment = environment or settings.ENVIRONMENT
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"

    exception_processors, renderer = _renderer(is_production)
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        mask_secrets,
        *exception_processors,
    ]

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )
    handler.setLevel(log_level_int)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if is_production else "console",
    )
