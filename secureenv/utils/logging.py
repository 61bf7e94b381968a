"""Utilities for logging."""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    No level or handlers are set here. The package root logger only carries a
    `NullHandler`; applications decide levels and where records go.
    """
    return logging.getLogger(name)
