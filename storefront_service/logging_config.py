"""
logging_config.py — Centralized Logging Configuration for the Storefront Service

This module configures unified logging behavior for the entire application.
All modules log through the standard `logging` package and inherit the format
and handlers set up here.

Features:
    • Combined console and (optional) file logging output
    • Process ID tagging for multi-process visibility
    • Reduced verbosity for server/framework internals (e.g., uvicorn access log)
"""

import logging
import sys

from . import config


def setup_logging(log_file=None, level=logging.INFO):
    """
    Configures the global logging system for the application.

    The configuration includes:
        - Log level: INFO (default)
        - Log format: timestamp, log level, process ID, logger name and message
        - Output destinations:
            1. File: `config.LOG_FILE` unless disabled with an empty value
            2. Console (stdout): real-time logs, Docker/Kubernetes compatible

    Args:
        log_file (str | None): Overrides `config.LOG_FILE` when given.
        level (int): Root log level.
    """
    log_format = '%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s'
    log_file = config.LOG_FILE if log_file is None else log_file

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=log_format, handlers=handlers)

    # Reduce verbosity from external libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
