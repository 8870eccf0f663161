#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Logging helpers shared by the conversion entry points."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Generator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Generator[None, None, None]:
    """Log how long a block took, at DEBUG level only.

    Parameters
    ----------
    logger : logging.Logger
        Logger receiving the timing message
    operation : str
        Label for the timed block (e.g., "Parsing HTML")

    Examples
    --------
        >>> logger = logging.getLogger(__name__)
        >>> with debug_timer(logger, "Rendering"):
        ...     pass

    """
    if not logger.isEnabledFor(logging.DEBUG):
        yield
        return

    start_time = time.perf_counter()
    yield
    elapsed = time.perf_counter() - start_time
    logger.debug(f"{operation} completed in {elapsed:.4f}s")


__all__ = ["debug_timer"]
