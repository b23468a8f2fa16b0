"""structlog setup for the story recorder server and the migrate command.

Every event in this project is a short snake_case name plus key/value
fields (``story_id``, ``category``, ``errno`` ...).  In development those
render as coloured console lines; with ``json_output`` (``APP_ENV=production``
in ``run()``) each event becomes one JSON object per line so the upload and
relocation failures can be grepped by field.

The stdlib root logger gets the same formatter, which is how uvicorn's
server messages end up in the same stream.  Per-request lines come from
``RequestLoggingMiddleware``, so uvicorn's own access log is turned off in
``story_recorder.main.run``.
"""

import logging
import sys
from typing import TextIO

import structlog


def build_processors(json_output: bool) -> list[structlog.types.Processor]:
    """Shared processor chain with the renderer for the chosen output last."""
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        renderer,
    ]


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one renderer.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.  Events below it are
            dropped before any processor runs.
        json_output: One JSON object per line instead of console output.
        stream: Where to write; defaults to stdout.
    """
    level = logging.getLevelName(log_level.upper())
    out = stream or sys.stdout
    processors = build_processors(json_output)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *processors,
        ],
    )
    handler = logging.StreamHandler(out)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(name: str) -> structlog.BoundLogger:
    """Named logger; falls back to console defaults if nothing configured yet."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
