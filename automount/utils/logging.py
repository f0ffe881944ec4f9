"""
Logging configuration utilities.

This module provides functions for setting up and configuring logging.
"""
import logging

LOGGER_NAME = 'automount'


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for the application.

    Third-party loggers stay at WARNING; only the automount logger follows
    the debug flag.

    Args:
        debug: Whether to enable debug logging
    """
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
