"""
structured logging setup. modules grab a logger with get_logger(__name__) and log key/value
events; call configure_logging once from whatever drives the computation.
"""

import logging
import sys

import structlog


def configure_logging(level="INFO", json_output=False):
    """
    configure structlog on top of the standard logging module.
    level = one of DEBUG, INFO, WARNING, ERROR, CRITICAL
    json_output = render events as JSON lines instead of the colored console format
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name=None):
    """
    return a structlog logger, usually named after the calling module
    """
    return structlog.get_logger(name)


def log_context(**kwargs):
    """
    context manager binding key/value pairs to every event logged inside the block, e.g.

        with log_context(feature="Z_SC2_MEAN_PC1"):
            log.info("computing")
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
