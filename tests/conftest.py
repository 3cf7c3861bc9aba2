"""
Shared pytest fixtures for the HBGRAPH test suite.

Provides reusable fixtures for creating test events and traces,
a quiet logger, and temporary file paths used across unit and
integration tests.
"""

import io
from pathlib import Path
from typing import Dict, Optional

import pytest

from hbgraph.core.event import Event
from hbgraph.core.trace import Trace
from hbgraph.core.vector_clock import VectorClock
from hbgraph.utils.logger import AnalysisLogger, LogLevel


def make_event(
    kind: str,
    process: str,
    clock: Dict[str, int],
    msg: Optional[int] = None,
) -> Event:
    """Convenience factory for creating Event objects in tests."""
    return Event(kind, process, VectorClock(clock), msg)


@pytest.fixture
def three_processes() -> frozenset:
    """A standard set of three process identifiers."""
    return frozenset({"A", "B", "C"})


@pytest.fixture
def chain_trace() -> Trace:
    """A -> B -> B: one message then a local follow-up send."""
    return Trace(
        [
            make_event("send", "A", {"A": 1, "B": 0}, 0),
            make_event("receive", "B", {"A": 1, "B": 1}, 0),
            make_event("send", "B", {"A": 1, "B": 2}, 1),
        ]
    )


@pytest.fixture
def concurrent_trace() -> Trace:
    """Two independent sends on different processes."""
    return Trace(
        [
            make_event("send", "A", {"A": 1, "B": 0}, 0),
            make_event("send", "B", {"A": 0, "B": 1}, 1),
        ]
    )


@pytest.fixture
def diamond_trace() -> Trace:
    """
    Seven events over three processes whose reduced graph is::

        0 -> 1, 3;  1 -> 2;  2 -> 6;  3 -> 4;  4 -> 5;  5 -> 6
    """
    return Trace(
        [
            make_event("send", "A", {"A": 1, "B": 0, "C": 0}, 0),
            make_event("receive", "B", {"A": 1, "B": 1, "C": 0}, 0),
            make_event("send", "B", {"A": 1, "B": 2, "C": 0}, 1),
            make_event("send", "A", {"A": 2, "B": 0, "C": 0}, 2),
            make_event("receive", "C", {"A": 2, "B": 0, "C": 1}, 2),
            make_event("send", "C", {"A": 2, "B": 0, "C": 2}, 3),
            make_event("receive", "C", {"A": 2, "B": 2, "C": 3}, 1),
        ]
    )


@pytest.fixture
def quiet_logger() -> AnalysisLogger:
    """A logger that writes nothing."""
    return AnalysisLogger(LogLevel.SILENT)


@pytest.fixture
def debug_stream() -> io.StringIO:
    """An in-memory stream for capturing logger output."""
    return io.StringIO()


@pytest.fixture
def tmp_trace_file(tmp_path: Path) -> Path:
    """Path for a temporary trace CSV file."""
    return tmp_path / "trace.csv"


@pytest.fixture
def tmp_property_file(tmp_path: Path) -> Path:
    """Path for a temporary property file."""
    return tmp_path / "safety.prop"


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def traces_dir(fixtures_dir: Path) -> Path:
    """Path to the test trace fixtures directory."""
    return fixtures_dir / "traces"


@pytest.fixture
def properties_dir(fixtures_dir: Path) -> Path:
    """Path to the test property fixtures directory."""
    return fixtures_dir / "properties"
