"""Log routing for deploy-local.

Stdout belongs to command output: in dry-run mode it is a shell script
that gets redirected into a file, so every log line goes to stderr.
``--log-json`` switches the stderr renderer to one JSON object per line.

Only the ``deploy_local`` logger follows ``--verbose``; everything else
(jinja2, rich, click) stays at WARNING.
"""

from __future__ import annotations

import logging
import sys

import structlog

PACKAGE_LOGGER = "deploy_local"


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(chain: list[structlog.types.Processor], log_json: bool) -> logging.Handler:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    mode: str | None = None,
) -> None:
    """Route stdlib and structlog records to stderr.

    Safe to call more than once; the root handler is replaced, not stacked.
    When *mode* is given (``"exec"`` or ``"dry-run"``) it is bound to every
    record.
    """
    chain = _processors()
    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stderr_handler(chain, log_json))
    root.setLevel(logging.WARNING)
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)

    structlog.contextvars.clear_contextvars()
    if mode is not None:
        structlog.contextvars.bind_contextvars(mode=mode)
