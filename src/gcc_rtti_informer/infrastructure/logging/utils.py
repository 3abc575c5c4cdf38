#!/usr/bin/env python3

"""Logging helpers shared by the recovery engine."""

import logging
from collections.abc import Callable
from functools import wraps
from time import perf_counter
from typing import Any, TypeVar, cast

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module name.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def format_address(address: int | None, pointer_size: int = 8) -> str:
    """Format an address the way the recovery logs and DOT tooltips show it.

    Args:
        address: Address to format, or None for an unknown address
        pointer_size: Pointer width in bytes, controls zero padding

    Returns:
        Upper-case hexadecimal string such as ``0x0000000000401000``
    """
    if address is None:
        return "<none>"
    return f"0x{address:0{pointer_size * 2}X}"


def log_timing(func: F) -> F:
    """
    Decorator logging how long a recovery phase took.

    Failures are logged with their elapsed time and re-raised unchanged.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger = get_logger(func.__module__)
        func_name = func.__qualname__

        logger.debug(f"Starting {func_name}")
        start_time = perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Failed {func_name} after {perf_counter() - start_time:.2f}s: {e}")
            raise

        logger.debug(f"Completed {func_name} in {perf_counter() - start_time:.2f}s")
        return result

    return cast("F", wrapper)
