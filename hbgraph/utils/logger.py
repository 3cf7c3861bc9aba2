"""
Structured logging for the causal graph analyzer.

Provides configurable log levels (silent, normal, verbose, debug)
with consistent formatting for progress updates, warnings, verdicts,
violations and graph statistics.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, Dict, TextIO

from hbgraph.core.event import Event


class LogLevel(Enum):
    """
    Logging levels for the analyzer.

    SILENT:  No output at all.
    NORMAL:  Verdicts, violations and warnings.
    VERBOSE: Progress information and statistics.
    DEBUG:   Per-edge and per-event processing output.
    """

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class AnalysisLogger:
    """
    Structured logger for the causal graph analyzer.

    Output is filtered by the configured log level.

    Attributes:
        level: The minimum log level to display.
        stream: The output stream (defaults to stdout).
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        stream: TextIO = sys.stdout,
    ) -> None:
        """
        Initialize logger with level and output stream.

        Args:
            level: Minimum log level to display.
            stream: Output stream (default: sys.stdout).
        """
        self.level: LogLevel = level
        self.stream: TextIO = stream

    def enabled(self, level: LogLevel) -> bool:
        """True when messages at *level* would be written."""
        return level is not LogLevel.SILENT and self.level.value >= level.value

    def debug(self, message: str, **kwargs: Any) -> None:
        """
        Log a debug message (only shown at DEBUG level).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled(LogLevel.DEBUG):
            self._write(f"[DEBUG] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log an info message (shown at VERBOSE and DEBUG levels).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled(LogLevel.VERBOSE):
            self._write(f"[INFO] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def warning(self, message: str) -> None:
        """Log a warning (shown at NORMAL level and above)."""
        if self.enabled(LogLevel.NORMAL):
            self._write(f"[WARNING] {message}")

    def verdict_holds(self) -> None:
        """Log a HOLDS verdict (shown at NORMAL level and above)."""
        if self.enabled(LogLevel.NORMAL):
            self._write("HOLDS: Safety property holds over every causal future")

    def verdict_violated(self, trigger_id: int, offending_id: int) -> None:
        """Log a VIOLATED verdict (shown at NORMAL level and above)."""
        if self.enabled(LogLevel.NORMAL):
            self._write(
                f"VIOLATED: Safety property fails at e-{offending_id} "
                f"in the causal future of e-{trigger_id}"
            )

    def violation(
        self,
        trigger_id: int,
        trigger: Event,
        offending_id: int,
        offending: Event,
    ) -> None:
        """
        Log the witnessing pair of a violated property (VERBOSE).

        Args:
            trigger_id: Id of the event that satisfied the precondition.
            trigger: That event.
            offending_id: Id of the descendant failing the postcondition.
            offending: That event.
        """
        if self.enabled(LogLevel.VERBOSE):
            self._write(
                f"[VIOLATION] Precondition met at e-{trigger_id} "
                f"({trigger.kind.label} on {trigger.process}), "
                f"postcondition failed in its future"
            )
            self._write(f"  --> e-{offending_id}: {offending.describe()}")

    def statistics(self, stats: Dict[str, Any]) -> None:
        """
        Log analysis statistics (shown at VERBOSE level and above).

        Args:
            stats: Dictionary of statistic names to values.
        """
        if self.enabled(LogLevel.VERBOSE):
            self._write("=== Statistics ===")
            for key, value in stats.items():
                label = key.replace("_", " ").title()
                if isinstance(value, float):
                    value = f"{value:.3f}"
                self._write(f"  {label}: {value}")

    def event_info(self, eid: int, event: Event) -> None:
        """
        Log per-event info at VERBOSE level.

        Args:
            eid: Event identifier (trace position).
            event: The event.
        """
        if self.enabled(LogLevel.VERBOSE):
            self._write(f"[EVENT] e-{eid:02d}: {event.describe()}")

    def edge(self, action: str, source: int, target: int) -> None:
        """
        Log a single edge operation at DEBUG level.

        Args:
            action: What happened to the edge (``added``, ``dropped``...).
            source: Cause event id.
            target: Effect event id.
        """
        if self.enabled(LogLevel.DEBUG):
            self._write(f"[DEBUG] Edge e-{source} -> e-{target} {action}")

    def _write(self, message: str) -> None:
        """Write a line to the output stream."""
        self.stream.write(message + "\n")
