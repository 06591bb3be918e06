"""
logging_config.py
Logging Configuration

Library modules log through logging.getLogger(__name__); applications call
configure_logging() once to see the output.
"""

import logging

logger = logging.getLogger("legged_wbtraj")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(level=logging.INFO, log_file=None):
    """
    Attach a console handler (and optionally a file handler) to the
    package logger. Calling it again only updates the level.
    """
    logger.setLevel(level)

    # Prevent duplicate handlers if called more than once
    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file is not None:
            file_handler = logging.FileHandler(log_file, mode="a")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
