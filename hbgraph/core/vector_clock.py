"""
Fidge-Mattern vector clock implementation.

Vector clocks enable determining causal relationships between events
in a distributed system by maintaining a vector of logical timestamps,
one per process. The key property is:

    e → f  ⟺  VC(e) < VC(f)

where < denotes the strict componentwise ordering.  A process that is
absent from a clock is read as zero, so every comparison walks the
*union* of both clocks' process keys.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional


class VectorClock:
    """
    Fidge-Mattern vector clock for causal ordering of distributed events.

    A vector clock maps process IDs to non-negative integer counters.
    Missing processes implicitly hold zero.  ``increment`` and ``merge``
    mutate the clock in place; derive new clocks with ``copy`` first
    when the original must be preserved (events keep their own copy).

    Attributes:
        clock: Copy of the explicit process → counter mapping.
        processes: Frozenset of the explicitly stored process IDs.
    """

    __slots__ = ("_clock",)

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    def __init__(self, initial_values: Optional[Mapping[str, int]] = None) -> None:
        """
        Initialise a vector clock from *initial_values*.

        Args:
            initial_values: Optional mapping of process IDs to counters.
                Processes not listed read as zero.

        Raises:
            ValueError: If a counter is negative or not an integer.
        """
        values: Dict[str, int] = {}
        for process, count in (initial_values or {}).items():
            if isinstance(count, bool) or not isinstance(count, int):
                raise ValueError(
                    f"Counter for process '{process}' must be an integer, got {count!r}"
                )
            if count < 0:
                raise ValueError(
                    f"Counter for process '{process}' must be non-negative, got {count}"
                )
            values[str(process)] = count
        self._clock: Dict[str, int] = values

    @classmethod
    def zero(cls, processes: Iterable[str]) -> VectorClock:
        """
        Return a clock holding an explicit zero for each of *processes*.

        Logically equal to the empty clock; the explicit entries only
        make display and iteration deterministic.
        """
        return cls({p: 0 for p in processes})

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def clock(self) -> Dict[str, int]:
        """Return a *copy* of the internal clock mapping."""
        return dict(self._clock)

    @property
    def processes(self) -> frozenset[str]:
        """Return the frozenset of explicitly tracked process IDs."""
        return frozenset(self._clock)

    def get(self, process: str) -> int:
        """Return the counter for *process*, or 0 if it is absent."""
        return self._clock.get(process, 0)

    def __getitem__(self, process: str) -> int:
        return self.get(process)

    def total(self) -> int:
        """Sum of all counters."""
        return sum(self._clock.values())

    # ------------------------------------------------------------------ #
    # Clock operations
    # ------------------------------------------------------------------ #

    def copy(self) -> VectorClock:
        """Return an independent clock with identical entries."""
        return VectorClock(self._clock)

    def increment(self, process: str) -> None:
        """Advance *process*'s own counter by one (in place)."""
        self._clock[process] = self._clock.get(process, 0) + 1

    def merge(self, other: VectorClock) -> None:
        """
        Merge *other* into this clock in place (component-wise maximum).

        Every process key present in either clock ends up holding
        ``max(self[p], other[p])``.
        """
        for process, count in other._clock.items():
            self._clock[process] = max(count, self._clock.get(process, 0))

    # ------------------------------------------------------------------ #
    # Ordering
    # ------------------------------------------------------------------ #

    def happens_before(self, other: VectorClock) -> bool:
        """
        True iff ``self`` strictly precedes ``other``.

        Every coordinate over the union of both key sets must satisfy
        ``self[p] <= other[p]`` and at least one must be strictly less.
        Stops at the first coordinate where ``self`` is larger.
        """
        strictly_less = False
        for process in self._clock.keys() | other._clock.keys():
            mine = self._clock.get(process, 0)
            theirs = other._clock.get(process, 0)
            if mine > theirs:
                return False
            if mine < theirs:
                strictly_less = True
        return strictly_less

    def is_concurrent_with(self, other: VectorClock) -> bool:
        """
        True when neither clock happens before the other.

        Identical clocks are reported as concurrent.
        """
        return not self.happens_before(other) and not other.happens_before(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VectorClock):
            return NotImplemented
        return self.happens_before(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, VectorClock):
            return NotImplemented
        return self == other or self.happens_before(other)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, VectorClock):
            return NotImplemented
        return other.happens_before(self)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, VectorClock):
            return NotImplemented
        return self == other or other.happens_before(self)

    # ------------------------------------------------------------------ #
    # Parsing
    # ------------------------------------------------------------------ #

    @classmethod
    def from_string(cls, s: str) -> VectorClock:
        """
        Parse a vector clock from the format ``"P1:2;P2:1;P3:0"``.

        An empty string yields the empty (all-zero) clock.

        Raises:
            ValueError: If the string is malformed or repeats a process.
        """
        vals: Dict[str, int] = {}
        s = s.strip()
        if not s:
            return cls()
        try:
            for token in s.split(";"):
                proc_id, count_str = token.split(":")
                proc_id = proc_id.strip()
                if not proc_id or proc_id in vals:
                    raise ValueError(token)
                vals[proc_id] = int(count_str.strip())
        except (ValueError, TypeError) as exc:
            raise ValueError(f"Malformed vector clock string: '{s}'") from exc
        return cls(vals)

    def to_string(self) -> str:
        """Inverse of :meth:`from_string` (sorted by process ID)."""
        return ";".join(f"{p}:{self._clock[p]}" for p in sorted(self._clock))

    # ------------------------------------------------------------------ #
    # Equality / repr
    # ------------------------------------------------------------------ #

    def __eq__(self, other: object) -> bool:
        """Zero-normalised equality: ``{A:1}`` equals ``{A:1, B:0}``."""
        if not isinstance(other, VectorClock):
            return NotImplemented
        return all(
            self._clock.get(p, 0) == other._clock.get(p, 0)
            for p in self._clock.keys() | other._clock.keys()
        )

    # Clocks are mutable.
    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        entries = ", ".join(f"{p}:{self._clock[p]}" for p in sorted(self._clock))
        return f"<{entries}>"

    def __repr__(self) -> str:
        entries = ", ".join(f"{p}:{self._clock[p]}" for p in sorted(self._clock))
        return f"VectorClock({entries})"
