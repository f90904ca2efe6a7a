"""
Logging Configuration
=====================

Modules log through logging.getLogger(__name__) under the
'strand_routing' namespace and never configure handlers themselves.
Applications and scripts call setup_logging() once.
"""

import logging
import sys
from typing import Optional

NAMESPACE = "strand_routing"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the 'strand_routing' logger.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to also write the log to
    """
    logger = logging.getLogger(NAMESPACE)
    logger.setLevel(level)

    # Repeated setup replaces handlers instead of duplicating output
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
