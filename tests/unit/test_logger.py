"""
Tests for the structured analysis logger.

Tests cover log level filtering, output formatting, verdict display,
violation and statistics formatting, and custom stream output.
"""

from io import StringIO

from hbgraph.core.event import Event
from hbgraph.core.vector_clock import VectorClock
from hbgraph.utils.logger import AnalysisLogger, LogLevel


def _logger(level: LogLevel) -> tuple:
    buf = StringIO()
    return AnalysisLogger(level=level, stream=buf), buf


# ---------------------------------------------------------------------------
# Tests: Log Level Filtering
# ---------------------------------------------------------------------------


class TestLogLevelFiltering:
    """Test that log levels filter messages correctly."""

    def test_silent_suppresses_all(self) -> None:
        """SILENT level produces no output."""
        logger, buf = _logger(LogLevel.SILENT)
        logger.debug("debug msg")
        logger.info("info msg")
        logger.warning("warn msg")
        logger.verdict_holds()
        logger.verdict_violated(0, 1)
        assert buf.getvalue() == ""

    def test_normal_shows_warnings_and_verdicts(self) -> None:
        """NORMAL level shows warnings and verdicts only."""
        logger, buf = _logger(LogLevel.NORMAL)
        logger.debug("debug msg")
        logger.info("info msg")
        logger.warning("careful")
        logger.verdict_holds()
        assert buf.getvalue() == (
            "[WARNING] careful\n"
            "HOLDS: Safety property holds over every causal future\n"
        )

    def test_verbose_shows_info(self) -> None:
        """VERBOSE level shows info messages with extra fields."""
        logger, buf = _logger(LogLevel.VERBOSE)
        logger.info("loaded", events=3)
        logger.debug("hidden")
        assert buf.getvalue() == "[INFO] loaded\n  events: 3\n"

    def test_debug_shows_everything(self) -> None:
        """DEBUG level shows debug messages and edges."""
        logger, buf = _logger(LogLevel.DEBUG)
        logger.debug("detail")
        logger.edge("dropped", 0, 2)
        assert "[DEBUG] detail" in buf.getvalue()
        assert "[DEBUG] Edge e-0 -> e-2 dropped" in buf.getvalue()

    def test_enabled(self) -> None:
        """enabled() reflects the configured level."""
        logger, _ = _logger(LogLevel.VERBOSE)
        assert logger.enabled(LogLevel.NORMAL)
        assert logger.enabled(LogLevel.VERBOSE)
        assert not logger.enabled(LogLevel.DEBUG)
        assert not logger.enabled(LogLevel.SILENT)


# ---------------------------------------------------------------------------
# Tests: Formatting
# ---------------------------------------------------------------------------


class TestFormatting:
    """Test the structured messages."""

    def test_verdict_violated(self) -> None:
        logger, buf = _logger(LogLevel.NORMAL)
        logger.verdict_violated(1, 6)
        assert buf.getvalue() == (
            "VIOLATED: Safety property fails at e-6 in the causal future of e-1\n"
        )

    def test_violation_detail(self) -> None:
        """Violation details name both events (VERBOSE)."""
        logger, buf = _logger(LogLevel.VERBOSE)
        trigger = Event("receive", "B", VectorClock({"A": 1, "B": 1}), 0)
        offending = Event("receive", "C", VectorClock({"C": 3}), 1)
        logger.violation(1, trigger, 6, offending)
        lines = buf.getvalue().splitlines()
        assert lines[0].startswith("[VIOLATION] Precondition met at e-1 (RECV on B)")
        assert lines[1] == "  --> e-6: Msg-1 RECV on C, VClock: <C:3>"

    def test_violation_hidden_at_normal(self) -> None:
        logger, buf = _logger(LogLevel.NORMAL)
        event = Event("send", "A", VectorClock({"A": 1}))
        logger.violation(0, event, 1, event)
        assert buf.getvalue() == ""

    def test_statistics(self) -> None:
        """Statistics are title-cased; floats get three decimals."""
        logger, buf = _logger(LogLevel.VERBOSE)
        logger.statistics({"direct_edges": 2, "avg_out_degree": 0.5})
        assert buf.getvalue() == (
            "=== Statistics ===\n"
            "  Direct Edges: 2\n"
            "  Avg Out Degree: 0.500\n"
        )

    def test_event_info(self) -> None:
        logger, buf = _logger(LogLevel.VERBOSE)
        logger.event_info(3, Event("send", "A", VectorClock({"A": 2}), 5))
        assert buf.getvalue() == "[EVENT] e-03: Msg-5 SEND on A, VClock: <A:2>\n"
