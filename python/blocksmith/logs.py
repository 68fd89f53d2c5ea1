import logging
import sys

import structlog


def configure_logging(level: int = logging.WARNING, json_output: bool = False) -> None:
    """
    Sends all structlog output to stderr.
    stdout is reserved for command output and the MCP stdio protocol.
    """
    logging.basicConfig(stream=sys.stderr, level=level, force=True)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
