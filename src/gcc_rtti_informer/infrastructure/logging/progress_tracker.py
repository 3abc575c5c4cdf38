#!/usr/bin/env python3

"""Progress tracking for RTTI recovery runs."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from time import perf_counter

import psutil


class ProgressTracker:
    """
    Track and report recovery progress.

    Times the recovery phases, counts captured regions and dispatched
    type_info records, and reports a one-line summary at the end of a run.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize progress tracker.

        Args:
            logger: Logger instance for progress reporting
        """
        self.logger = logger
        self.start_time = perf_counter()
        self.region_count = 0
        self.region_bytes = 0
        self.record_count = 0
        self.operation_stack: list[tuple[str, float]] = []

    @contextmanager
    def track_operation(self, operation_name: str) -> Iterator[None]:
        """
        Track one recovery phase with timing.

        Args:
            operation_name: Name of the phase being tracked
        """
        start_time = perf_counter()
        self.operation_stack.append((operation_name, start_time))

        self.logger.debug(f"Starting operation: {operation_name}")

        try:
            yield
            elapsed = perf_counter() - start_time
            self.logger.debug(f"Completed operation: {operation_name} in {elapsed:.3f}s")
        except Exception as e:
            elapsed = perf_counter() - start_time
            self.logger.error(f"Failed operation: {operation_name} after {elapsed:.3f}s: {e}")
            raise
        finally:
            self.operation_stack.pop()

    def count_region(self, size: int) -> None:
        """Record one captured memory region of ``size`` bytes."""
        self.region_count += 1
        self.region_bytes += size

    def count_records(self, count: int = 1) -> None:
        """Increment the number of type_info records handed to a formatter."""
        self.record_count += count

    def report_summary(self, class_count: int) -> None:
        """Report final recovery statistics."""
        total_time = perf_counter() - self.start_time
        megabytes = self.region_bytes / 1024 / 1024

        self.logger.info(
            f"Recovery complete: {self.region_count} regions ({megabytes:.1f} MiB), "
            f"{self.record_count} records, {class_count} classes in {total_time:.2f}s"
        )

    def get_current_context(self) -> str:
        """Describe the current operation stack for log messages."""
        if not self.operation_stack:
            return "idle"

        return " → ".join(op[0] for op in self.operation_stack)

    def log_memory_usage(self) -> None:
        """Log the resident set size of this process."""
        try:
            memory_mb = psutil.Process().memory_info().rss / 1024 / 1024
        except psutil.Error as e:
            self.logger.debug(f"Could not get memory usage: {e}")
            return
        self.logger.debug(f"Memory usage: {memory_mb:.1f} MB")

    def reset(self) -> None:
        """Reset all counters and timers."""
        self.start_time = perf_counter()
        self.region_count = 0
        self.region_bytes = 0
        self.record_count = 0
        self.operation_stack.clear()
