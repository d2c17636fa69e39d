# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging utilities for the Sendlix SDK.

The library only hands out named loggers. Level, handlers and format are
left to the application (or to the ``sendlix`` CLI entry point, which calls
``logging.basicConfig()``) so that importing the SDK never adds handlers.

Example:
    Typical usage in a module::

        from sendlix.logger import get_logger

        logger = get_logger("sendlix.auth")
        logger.info("Token refreshed")
"""

import logging


def get_logger(name: str = "sendlix") -> logging.Logger:
    """Retrieve a logger instance for the SDK.

    Args:
        name: The logger name. Defaults to "sendlix".

    Returns:
        A ``logging.Logger`` instance bound to the given name.
    """
    return logging.getLogger(name)
