"""Logging setup for scripts and host wrappers.

Library modules only create loggers with ``logging.getLogger(__name__)``;
handlers are attached here, on request.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    name: str = "pathtracer",
    fmt: str = LOG_FORMAT,
) -> logging.Logger:
    """Attach a console handler to the package logger.

    Calling this more than once replaces the previously installed handler
    instead of stacking duplicates.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        name: Logger name to configure.
        fmt: Format string for log records.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    for handler in list(logger.handlers):
        if getattr(handler, "_pathtracer_console", False):
            logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(fmt))
    console_handler._pathtracer_console = True  # type: ignore[attr-defined]
    logger.addHandler(console_handler)

    return logger
