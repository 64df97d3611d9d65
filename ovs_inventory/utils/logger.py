import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

import structlog

from ..config import InventorySettings

LOGGER_NAME = "ovs_inventory"

_shared_processors: List = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def _formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def configure_logging(level: str = "INFO", json_output: bool = True, log_file: Optional[str] = None) -> logging.Logger:
    """Route structlog events for the package to stdout (and optionally a rotating file)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    logger.handlers.clear()

    formatter = _formatter(json_output)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level] + _shared_processors + [
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return logger


def setup_logging(settings: Optional[InventorySettings] = None) -> logging.Logger:
    """Configure package logging from `LOG_LEVEL`, `LOG_JSON` and `LOG_FILE`."""
    settings = settings or InventorySettings()
    return configure_logging(settings.log_level, json_output=settings.log_json, log_file=settings.log_file)
