"""
structlog setup for the connection string service.

Events are rendered as JSON for servers and containers or as console text
locally. Output goes to stderr: stdout is reserved for the MCP stdio transport.
"""
import contextlib
import logging
import sys
from typing import Any, Iterator, Optional

import structlog

SERVICE_NAME = "connstr"


class StaticFields:
    """Processor stamping fixed fields (service, environment) on every event."""

    def __init__(self, **fields: Any):
        self.fields = {key: value for key, value in fields.items() if value is not None}

    def __call__(self, logger, method_name: str, event_dict: dict) -> dict:
        for key, value in self.fields.items():
            event_dict.setdefault(key, value)
        return event_dict


def configure_logging(log_level: str = "INFO", json_format: bool = True, environment: Optional[str] = None):
    """
    Configure global logging for the application.

    Args:
        log_level: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL" (case-insensitive)
        json_format: JSON lines when True, console rendering when False
        environment: deployment environment stamped on each event (Int, Stg, Prd)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    # Library loggers (pydantic, mcp) share the stream and level
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    renderer = structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            StaticFields(service=SERVICE_NAME, environment=environment),
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.set_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


@contextlib.contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind fields (profile, tool) to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield
