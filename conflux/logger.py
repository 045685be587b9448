import logging
from typing import Any, Optional

import structlog
from structlog.types import Processor

LOGGER_NAME = "conflux"

# Silent unless the application configures logging
logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())

_timestamper = structlog.processors.TimeStamper(fmt="iso")

_processors: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    _timestamper,
    structlog.processors.StackInfoRenderer(),
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


def get_conflux_logger(log_name: str = LOGGER_NAME, **context: Any):
    """
    Return a structlog logger writing to the stdlib logger ``log_name``.

    The logger does not depend on the global structlog configuration, so a
    host application decides where (and whether) the records go.

    Args:
        log_name: Name of the underlying stdlib logger
        **context: Key-value pairs bound to every message of the returned logger
    """
    logger = structlog.wrap_logger(
        logging.getLogger(log_name),
        processors=_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    if context:
        logger = logger.bind(**context)
    return logger


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> logging.Logger:
    """
    Attach a structlog renderer to the ``conflux`` logger.

    Calling it again only changes the level; the handler is installed once.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level.upper())
    if any(isinstance(h.formatter, structlog.stdlib.ProcessorFormatter) for h in logger.handlers):
        return logger

    if json_logs:
        render_chain = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        render_chain = [structlog.dev.ConsoleRenderer()]

    handler = logging.StreamHandler()
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.add_log_level, _timestamper],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta] + render_chain,
    ))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def init_logger(config: Optional[Any] = None):
    """
    Initialize structured logging for an application using conflux.

    Args:
        config: Object exposing ``LOG_LEVEL`` and ``LOG_JSON``; defaults to
            :class:`conflux.config.Config`

    Returns:
        The package logger
    """
    if config is None:
        from conflux.config import Config
        config = Config

    setup_logging(json_logs=config.LOG_JSON, log_level=config.LOG_LEVEL)

    return get_conflux_logger()
