"""Logging helper for ezsmtp.

The library never installs handlers; configure them in the application with
``logging.basicConfig()`` or equivalent.

Example:
    from ezsmtp.logger import get_logger

    logger = get_logger("ezsmtp.transport")
    logger.debug("Connected")
"""

import logging


def get_logger(name: str = "ezsmtp") -> logging.Logger:
    """Return the standard library logger bound to ``name``."""
    return logging.getLogger(name)
