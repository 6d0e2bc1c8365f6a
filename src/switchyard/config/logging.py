"""Log output for the pipeline behaviors and the engine's plumbing.

Behaviors emit structured events (``request.slow``, ``cache.hit``, ...)
through ``structlog.get_logger``; the registry, plugin manager, and
bootstrap use stdlib ``logging``. Both paths are rendered by a single
``ProcessorFormatter`` on stderr, either for humans or as JSON lines.

The mediator binds the dispatched message type into structlog's context
variables, so every record emitted while a request is in flight carries
a ``message_type`` field.
"""

from __future__ import annotations

import logging
import sys

import structlog

LOGGER_NAME = "switchyard"


def _shared_processors(*, log_json: bool) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if log_json:
        # Console rendering prints tracebacks itself; JSON needs them as a field.
        processors.append(structlog.processors.format_exc_info)
    return processors


def _renderer(*, log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route structlog and stdlib records to stderr.

    Args:
        verbose: Show switchyard's DEBUG records (cache hits, registrations).
            Otherwise only warnings such as ``request.slow`` get through.
        log_json: One JSON object per line instead of console output.

    Safe to call repeatedly; the root handler is replaced, not stacked.
    """
    shared = _shared_processors(log_json=log_json)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json=log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    # Third-party libraries (pluggy, asyncio) stay at WARNING.
    root.setLevel(logging.WARNING)

    logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG if verbose else logging.WARNING)
