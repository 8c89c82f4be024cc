"""structlog configuration: readable key/value console logs."""

import sys

import structlog

from moonmanifest import config


def setup_logging(level: int | None = None) -> None:
    """Configure structlog once for the process.

    Args:
        level: Minimum level to emit. Defaults to ``LOG_LEVEL`` from the environment.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            config.log_level() if level is None else level
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
