# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for fluenthttp.

Every module logs through ``logging.getLogger(__name__)``, so all records land
under the ``fluenthttp`` logger. The library never touches the root logger.
"""

from __future__ import annotations

import logging
import os

LOGGER_NAME = "fluenthttp"
DEFAULT_LOG_LEVEL = os.getenv("FLUENTHTTP_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def setup_logging(level: str | None = None, *, stream=None) -> logging.Logger:
    """Attach a stream handler to the ``fluenthttp`` logger and set its level.

    Calling it again only updates the level; the handler is installed once.
    """
    global _handler
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, effective_level, logging.WARNING))
    if _handler is None or _handler not in logger.handlers:
        _handler = logging.StreamHandler(stream)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
    return logger


__all__ = ["LOGGER_NAME", "setup_logging"]
