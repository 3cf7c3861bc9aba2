"""
CSV trace file parser for recorded executions.

Reads event traces in CSV format, constructing Event objects with
vector clocks, and collects the trace's process set.  The analysis
operates offline, so all events are loaded upfront.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, List, Optional

from hbgraph.core.event import Event, EventKind
from hbgraph.core.trace import Trace
from hbgraph.core.vector_clock import VectorClock


@dataclass
class TraceMetadata:
    """
    Metadata extracted from a trace file.

    Attributes:
        processes: Set of all process IDs.
        event_count: Total number of events.
        declared: Whether the processes came from a directive.
    """

    processes: FrozenSet[str]
    event_count: int
    declared: bool = False


@dataclass
class TraceData:
    """
    Complete trace data loaded from a file.

    Attributes:
        trace: All events in file order.
        metadata: Trace metadata.
    """

    trace: Trace
    metadata: TraceMetadata


_REQUIRED_HEADERS = {"kind", "process", "vc"}


class TraceReader:
    """
    Parses CSV trace files into a :class:`Trace`.

    Expected CSV format::

        # Optional: system_processes directive
        # system_processes: A|B|C

        # Required headers (msg and id are optional)
        kind,process,vc,msg
        send,A,A:1;B:0;C:0,0
        receive,B,A:1;B:1;C:0,0

    Attributes:
        filepath: Path to the trace CSV file.
    """

    def __init__(self, filepath: Path) -> None:
        """
        Initialize reader with file path.

        Args:
            filepath: Path to the CSV trace file.
        """
        self.filepath: Path = Path(filepath)

    def read_all(self) -> TraceData:
        """
        Read all events and metadata.

        Returns:
            TraceData with the trace and its metadata.
        """
        directives = self._parse_directives()
        trace = Trace(self.read_events(), processes=directives.get("processes"))

        metadata = TraceMetadata(
            processes=trace.processes,
            event_count=len(trace),
            declared=directives.get("processes") is not None,
        )
        return TraceData(trace=trace, metadata=metadata)

    def read_metadata(self) -> TraceMetadata:
        """
        Read only metadata without building events.

        Returns:
            TraceMetadata with processes and event count.
        """
        directives = self._parse_directives()

        if directives.get("processes") is not None:
            processes = directives["processes"]
        else:
            processes = self._infer_processes()

        return TraceMetadata(
            processes=processes,
            event_count=self._count_events(),
            declared=directives.get("processes") is not None,
        )

    def read_events(self) -> List[Event]:
        """
        Read all events from the file.

        Returns:
            List of Event objects in file order.

        Raises:
            FileNotFoundError: If the trace file does not exist.
            ValueError: If headers are missing or a row is malformed.
        """
        if not self.filepath.exists():
            raise FileNotFoundError(f"Trace file not found: {self.filepath}")

        lines = self._read_data_lines()
        if not lines:
            return []

        reader = csv.DictReader(lines)
        headers = set(reader.fieldnames or [])

        missing = _REQUIRED_HEADERS - headers
        if missing:
            raise ValueError(f"Missing required headers: {sorted(missing)}")

        events: List[Event] = []
        for position, row in enumerate(reader):
            try:
                events.append(self._parse_event_row(row, position))
            except (ValueError, TypeError) as exc:
                raise ValueError(f"Row {position + 1}: {exc}") from exc
        return events

    def validate(self) -> List[str]:
        """
        Validate the trace file and return a list of error strings.

        Validates:
        - Required headers are present
        - Every row parses
        - The events respect the clock-construction contract

        Returns:
            List of error messages (empty if valid).
        """
        errors: List[str] = []

        if not self.filepath.exists():
            errors.append(f"File not found: {self.filepath}")
            return errors

        lines = self._read_data_lines()
        if not lines:
            errors.append("No data rows found in file")
            return errors

        reader = csv.DictReader(lines)
        headers = set(reader.fieldnames or [])
        missing = _REQUIRED_HEADERS - headers
        if missing:
            errors.append(f"Missing required headers: {sorted(missing)}")
            return errors

        try:
            trace = Trace(self.read_events())
        except ValueError as exc:
            errors.append(str(exc))
            return errors

        errors.extend(trace.validate())
        return errors

    # ------------------------------------------------------------------ #
    # Static helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def parse_vector_clock(s: str) -> VectorClock:
        """
        Parse vector clock from string format ``A:2;B:1;C:0``.

        Processes left out of the string read as zero.
        """
        return VectorClock.from_string(s)

    @staticmethod
    def parse_message_id(s: Optional[str]) -> Optional[int]:
        """
        Parse an optional message id.

        Returns:
            The id, or None for an empty field.
        """
        s = (s or "").strip()
        if not s:
            return None
        return int(s)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _parse_directives(self) -> dict:
        """Extract directives from comment lines in the file."""
        directives: dict = {}
        if not self.filepath.exists():
            return directives

        with open(self.filepath) as f:
            for line in f:
                line = line.strip()
                if not line.startswith("#"):
                    continue
                content = line.lstrip("#").strip()
                if content.startswith("system_processes:"):
                    val = content.split(":", 1)[1].strip()
                    directives["processes"] = frozenset(
                        p.strip() for p in val.split("|") if p.strip()
                    )

        return directives

    def _read_data_lines(self) -> List[str]:
        """Read non-comment, non-empty lines from the file."""
        if not self.filepath.exists():
            return []

        lines: List[str] = []
        with open(self.filepath) as f:
            for line in f:
                stripped = line.strip()
                if stripped and not stripped.startswith("#"):
                    lines.append(stripped)
        return lines

    def _infer_processes(self) -> FrozenSet[str]:
        """Infer process set from the process column and clock keys."""
        lines = self._read_data_lines()
        if not lines:
            return frozenset()

        reader = csv.DictReader(lines)
        processes: set[str] = set()
        for row in reader:
            proc = (row.get("process") or "").strip()
            if proc:
                processes.add(proc)
            vc = (row.get("vc") or "").strip()
            if vc:
                processes.update(self.parse_vector_clock(vc).processes)
        return frozenset(processes)

    def _count_events(self) -> int:
        """Count data rows (excluding header)."""
        lines = self._read_data_lines()
        if not lines:
            return 0
        return len(lines) - 1

    def _parse_event_row(self, row: dict, position: int) -> Event:
        """Parse a single CSV row into an Event."""
        eid = (row.get("id") or "").strip()
        if eid and int(eid) != position:
            raise ValueError(f"id {eid} does not match row position {position}")

        return Event(
            kind=EventKind.parse(row["kind"] or ""),
            process=(row["process"] or "").strip(),
            clock=self.parse_vector_clock(row["vc"] or ""),
            message_id=self.parse_message_id(row.get("msg")),
        )
