#!/usr/bin/env python3

"""Logging infrastructure for the application."""

from .logger_setup import LoggerSetup
from .progress_tracker import ProgressTracker
from .utils import format_address, get_logger, log_timing

__all__ = [
    "LoggerSetup",
    "ProgressTracker",
    "format_address",
    "get_logger",
    "log_timing",
]
