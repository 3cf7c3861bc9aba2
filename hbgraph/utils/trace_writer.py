"""
CSV trace file writer.

Writes traces in the format read by
:class:`~hbgraph.utils.trace_reader.TraceReader`, so generated traces
can be saved, inspected and replayed.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import TextIO

from hbgraph.core.trace import Trace


class TraceWriter:
    """
    Serializes a :class:`Trace` to CSV.

    The ``# system_processes:`` directive records the process set, and
    every clock is written with all of the trace's processes so rows
    are self-describing.

    Attributes:
        trace: The trace to write.
    """

    HEADERS = ("kind", "process", "vc", "msg")

    def __init__(self, trace: Trace) -> None:
        self.trace = trace

    def write(self, stream: TextIO) -> None:
        """Write the trace to an open text stream."""
        processes = sorted(self.trace.processes)
        stream.write(f"# system_processes: {'|'.join(processes)}\n")

        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(self.HEADERS)
        for event in self.trace:
            vc = ";".join(f"{p}:{event.clock.get(p)}" for p in processes)
            msg = "" if event.message_id is None else str(event.message_id)
            writer.writerow((event.kind.value, event.process, vc, msg))

    def to_csv(self) -> str:
        """Return the CSV text."""
        buffer = io.StringIO()
        self.write(buffer)
        return buffer.getvalue()

    def save(self, filepath: Path) -> None:
        """
        Write the trace to *filepath*.

        Args:
            filepath: Destination CSV path.
        """
        Path(filepath).write_text(self.to_csv())
