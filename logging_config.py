"""
Logging Configuration

Shared logging setup for the benchmark harness and any embedding script.
Library modules under ``kepler_orbit`` only create module loggers and emit
DEBUG records (solver non-convergence); scripts decide where those go.

Usage:
    from logging_config import configure_logging, get_logger

    configure_logging("DEBUG", log_file="benchmark.log")
    logger = get_logger(__name__)
    logger.info("Propagated 5000 orbits")
"""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configure the root logger, replacing any handlers already installed.

    Parameters
    ----------
    level : int or str
        Logging level, numeric (logging.DEBUG) or by name ("DEBUG")
    log_file : str, optional
        Also write records to this file. If None, logs only to stdout.
    """
    if isinstance(level, str):
        level = level.upper()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """Module logger (typically ``get_logger(__name__)``)."""
    return logging.getLogger(name)
