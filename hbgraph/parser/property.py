"""
Safety property utilities.

Provides convenience functions for parsing predicates, loading
precondition / postcondition pairs from property files, and turning
them into the callables the safety checker expects.

Property file format::

    # If A sends with clock A:5, everything after it must happen after it
    pre:  process == "A" && kind == send && clock[A] == 5
    post: trigger hb future

Lines that do not start with ``pre:`` or ``post:`` continue the
previous clause.  ``#`` starts a comment.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence

from hbgraph.core.event import Event
from hbgraph.core.safety import Postcondition, Precondition
from hbgraph.parser.ast_nodes import FUTURE, Binding, Predicate
from hbgraph.parser.grammar import PredicateParser


_parser = PredicateParser()


class PropertyError(Exception):
    """Exception raised for malformed safety properties."""

    pass


def parse_predicate(text: str) -> Predicate:
    """
    Parse a predicate string into an AST.

    Args:
        text: The predicate string.

    Returns:
        The root Predicate node of the AST.

    Raises:
        LexerError: If the predicate contains an invalid character.
        ParseError: If the predicate is syntactically invalid.
    """
    return _parser.parse(text)


@dataclass(frozen=True)
class SafetyProperty:
    """
    A precondition / postcondition pair.

    Unqualified fields in the precondition refer to the candidate
    trigger; in the postcondition they refer to the future event.

    Attributes:
        precondition: Predicate selecting trigger events.
        postcondition: Predicate required of every causal descendant.
        name: Optional label used in reports.
    """

    precondition: Predicate
    postcondition: Predicate
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if FUTURE in self.precondition.subjects():
            raise PropertyError(
                f"Precondition '{self.precondition}' refers to 'future', "
                f"which only exists in postconditions"
            )

    @classmethod
    def parse(cls, pre: str, post: str, name: Optional[str] = None) -> SafetyProperty:
        """Parse both clauses from strings."""
        return cls(parse_predicate(pre), parse_predicate(post), name)

    def precondition_fn(self, events: Optional[Sequence[Event]] = None) -> Precondition:
        """
        Return ``precondition(event) -> bool`` for the checker.

        Args:
            events: The graph's events.  Needed only when the
                precondition reads ``id``; the checker passes events
                without their ids, so they are looked up by identity.
        """
        predicate = self.precondition
        ids: Dict[int, int] = {id(e): i for i, e in enumerate(events or ())}

        def precondition(event: Event) -> bool:
            return predicate.evaluate(Binding(ids.get(id(event)), event))

        return precondition

    def postcondition_fn(self) -> Postcondition:
        """Return ``postcondition(tid, trigger, fid, future) -> bool``."""
        predicate = self.postcondition

        def postcondition(
            trigger_id: int, trigger: Event, future_id: int, future: Event,
        ) -> bool:
            return predicate.evaluate(
                Binding(trigger_id, trigger, future_id, future, default=FUTURE)
            )

        return postcondition

    def __str__(self) -> str:
        label = f"{self.name}: " if self.name else ""
        return f"{label}pre: {self.precondition}; post: {self.postcondition}"


def parse_property(text: str, name: Optional[str] = None) -> SafetyProperty:
    """
    Parse the contents of a property file.

    Raises:
        PropertyError: If a clause is missing, repeated, or text appears
            before the first clause.
        LexerError, ParseError: If a clause is not a valid predicate.
    """
    clauses: Dict[str, str] = {}
    current: Optional[str] = None

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, rest = line.partition(":")
        key = key.strip().lower()
        if key in ("pre", "post") and sep:
            if key in clauses:
                raise PropertyError(f"Clause '{key}' given more than once")
            clauses[key] = rest.strip()
            current = key
        elif current is None:
            raise PropertyError(f"Expected 'pre:' or 'post:' before '{line}'")
        else:
            clauses[current] = f"{clauses[current]}\n{line}".strip()

    for key in ("pre", "post"):
        if not clauses.get(key):
            raise PropertyError(f"Property is missing its '{key}:' clause")

    return SafetyProperty.parse(clauses["pre"], clauses["post"], name)


def load_property(path: Path) -> SafetyProperty:
    """
    Load a property file.

    Raises:
        FileNotFoundError: If *path* does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Property file not found: {path}")
    return parse_property(path.read_text(), name=path.stem)

