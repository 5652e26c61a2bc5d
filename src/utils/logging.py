"""
Radius Demographics - Logging Configuration
Console and daily-file logging shared by the API and the report CLI

Geometry and file readers (fiona/pyogrio under geopandas, GEOS via shapely)
log every layer open and topology repair at INFO/DEBUG; those loggers are
held at WARNING so a classification run does not bury the report output.
"""

import logging
import os
import sys
from datetime import datetime
from typing import List

from pythonjsonlogger import jsonlogger

from config.settings import get_settings

settings = get_settings()

NOISY_LOGGERS = ("fiona", "pyogrio", "shapely.geos", "urllib3")

JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _build_formatter() -> logging.Formatter:
    if settings.ENVIRONMENT == "production":
        # Every record names its deployment so shipped logs can be filtered
        return jsonlogger.JsonFormatter(
            fmt=JSON_FORMAT,
            datefmt="%Y-%m-%dT%H:%M:%S",
            static_fields={"environment": settings.ENVIRONMENT},
        )
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def _build_handlers(name: str, formatter: logging.Formatter) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        log_file = os.path.join(settings.LOG_DIR, f"{name}_{datetime.now().strftime('%Y%m%d')}.log")
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def setup_logging(name: str = "radius_demographics") -> logging.Logger:
    """
    Configure logging for an entry point (API process or report CLI).

    The named logger and the root logger share one set of handlers, so
    module loggers from get_logger(__name__) land in the same stream and
    file without double logging.

    Args:
        name: Logger name, also used as the log file prefix

    Returns:
        Configured logger instance
    """
    level = getattr(logging, settings.LOG_LEVEL)
    handlers = _build_handlers(name, _build_formatter())

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers = list(handlers)
    logger.propagate = False

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = list(handlers)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Logger for a module (pass __name__)"""
    return logging.getLogger(module_name)
