"""
Abstract syntax tree definitions for safety property predicates.

Predicates are boolean expressions over one or two events: the
*trigger* (an event selected by a precondition) and a *future* event
(a descendant of the trigger, in postconditions).  Nodes are immutable
and hashable; ``evaluate`` runs them against a :class:`Binding`.
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple

from hbgraph.core.event import Event, EventKind

TRIGGER = "trigger"
FUTURE = "future"

#: Fields readable on an event.
FIELDS = frozenset({"id", "process", "kind", "msg"})

_ORDERING: Dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class PredicateError(Exception):
    """Exception raised when a predicate cannot be evaluated."""

    pass


@dataclass(frozen=True)
class Binding:
    """
    Events a predicate is evaluated against.

    Attributes:
        trigger_id: Id of the trigger event.
        trigger: The trigger event.
        future_id: Id of the future event (postconditions only).
        future: The future event (postconditions only).
        default: Subject that unqualified fields refer to.
    """

    trigger_id: Optional[int]
    trigger: Event
    future_id: Optional[int] = None
    future: Optional[Event] = None
    default: str = TRIGGER

    def resolve(self, subject: Optional[str]) -> Tuple[Optional[int], Event]:
        """Return ``(id, event)`` for *subject* (``None`` = default)."""
        name = subject or self.default
        if name == TRIGGER:
            return self.trigger_id, self.trigger
        if self.future is None or self.future_id is None:
            raise PredicateError("'future' is not bound when evaluating a precondition")
        return self.future_id, self.future


# === Terms ===


class Term(ABC):
    """Base class for value-producing nodes."""

    @abstractmethod
    def value(self, binding: Binding) -> Any:
        """Return the term's value under *binding*."""

    def subjects(self) -> FrozenSet[Optional[str]]:
        """Subjects referenced by this term (``None`` = unqualified)."""
        return frozenset()

    def __repr__(self) -> str:
        return str(self)


@dataclass(frozen=True, repr=False)
class Literal(Term):
    """An integer or string constant."""

    constant: Any

    def value(self, binding: Binding) -> Any:
        return self.constant

    def __str__(self) -> str:
        if isinstance(self.constant, str):
            return f'"{self.constant}"'
        return str(self.constant)


@dataclass(frozen=True, repr=False)
class KindLiteral(Term):
    """The ``send`` or ``receive`` keyword."""

    kind: EventKind

    def value(self, binding: Binding) -> Any:
        return self.kind.value

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True, repr=False)
class Field(Term):
    """
    A field of the trigger, future, or default event.

    Attributes:
        name: One of ``id``, ``process``, ``kind``, ``msg``.
        subject: ``"trigger"``, ``"future"`` or ``None``.
    """

    name: str
    subject: Optional[str] = None

    def value(self, binding: Binding) -> Any:
        eid, event = binding.resolve(self.subject)
        if self.name == "id":
            if eid is None:
                raise PredicateError(f"Event id is not known when evaluating '{self}'")
            return eid
        if self.name == "process":
            return event.process
        if self.name == "kind":
            return event.kind.value
        return event.message_id

    def subjects(self) -> FrozenSet[Optional[str]]:
        return frozenset({self.subject})

    def __str__(self) -> str:
        return f"{self.subject}.{self.name}" if self.subject else self.name


@dataclass(frozen=True, repr=False)
class ClockEntry(Term):
    """A single vector clock coordinate, ``clock[P]``."""

    process: str
    subject: Optional[str] = None

    def value(self, binding: Binding) -> Any:
        _, event = binding.resolve(self.subject)
        return event.clock.get(self.process)

    def subjects(self) -> FrozenSet[Optional[str]]:
        return frozenset({self.subject})

    def __str__(self) -> str:
        prefix = f"{self.subject}." if self.subject else ""
        return f"{prefix}clock[{self.process}]"


# === Predicates ===


class Predicate(ABC):
    """
    Base class for all boolean predicate nodes.

    All nodes are immutable and support equality comparison and
    hashing for use in sets and dictionaries.
    """

    @abstractmethod
    def evaluate(self, binding: Binding) -> bool:
        """Evaluate the predicate under *binding*."""

    @abstractmethod
    def subjects(self) -> FrozenSet[Optional[str]]:
        """Subjects referenced anywhere in the predicate."""

    def __repr__(self) -> str:
        return str(self)


@dataclass(frozen=True, repr=False)
class BoolConstant(Predicate):
    """``true`` or ``false``."""

    constant: bool

    def evaluate(self, binding: Binding) -> bool:
        return self.constant

    def subjects(self) -> FrozenSet[Optional[str]]:
        return frozenset()

    def __str__(self) -> str:
        return "true" if self.constant else "false"


@dataclass(frozen=True, repr=False)
class Not(Predicate):
    """``!phi``."""

    operand: Predicate

    def evaluate(self, binding: Binding) -> bool:
        return not self.operand.evaluate(binding)

    def subjects(self) -> FrozenSet[Optional[str]]:
        return self.operand.subjects()

    def __str__(self) -> str:
        return f"!{self.operand}"


@dataclass(frozen=True, repr=False)
class _Binary(Predicate):
    left: Predicate
    right: Predicate

    symbol = ""

    def subjects(self) -> FrozenSet[Optional[str]]:
        return self.left.subjects() | self.right.subjects()

    def __str__(self) -> str:
        return f"({self.left} {self.symbol} {self.right})"


@dataclass(frozen=True, repr=False)
class And(_Binary):
    """``phi && psi`` (short-circuits)."""

    symbol = "&&"

    def evaluate(self, binding: Binding) -> bool:
        return self.left.evaluate(binding) and self.right.evaluate(binding)


@dataclass(frozen=True, repr=False)
class Or(_Binary):
    """``phi || psi`` (short-circuits)."""

    symbol = "||"

    def evaluate(self, binding: Binding) -> bool:
        return self.left.evaluate(binding) or self.right.evaluate(binding)


@dataclass(frozen=True, repr=False)
class Implies(_Binary):
    """``phi -> psi``."""

    symbol = "->"

    def evaluate(self, binding: Binding) -> bool:
        return (not self.left.evaluate(binding)) or self.right.evaluate(binding)


@dataclass(frozen=True, repr=False)
class Comparison(Predicate):
    """
    ``left op right`` for ``op`` in ``== != < <= > >=``.

    Equality works on any values.  Ordering requires integers on both
    sides; an absent message id makes an ordering comparison false.
    """

    op: str
    left: Term
    right: Term

    def evaluate(self, binding: Binding) -> bool:
        lhs = self.left.value(binding)
        rhs = self.right.value(binding)
        if self.op == "==":
            return lhs == rhs
        if self.op == "!=":
            return lhs != rhs
        if lhs is None or rhs is None:
            return False
        if not (isinstance(lhs, int) and isinstance(rhs, int)):
            raise PredicateError(
                f"Cannot order {lhs!r} and {rhs!r} in '{self}': "
                f"'{self.op}' needs integers"
            )
        return _ORDERING[self.op](lhs, rhs)

    def subjects(self) -> FrozenSet[Optional[str]]:
        return self.left.subjects() | self.right.subjects()

    def __str__(self) -> str:
        return f"{self.left} {self.op} {self.right}"


@dataclass(frozen=True, repr=False)
class CausalRelation(Predicate):
    """
    ``a hb b`` (happens-before) or ``a concurrent b`` between subjects.
    """

    op: str
    left: str
    right: str

    def evaluate(self, binding: Binding) -> bool:
        _, a = binding.resolve(self.left)
        _, b = binding.resolve(self.right)
        if self.op == "hb":
            return a.happens_before(b)
        return a.is_concurrent_with(b)

    def subjects(self) -> FrozenSet[Optional[str]]:
        return frozenset({self.left, self.right})

    def __str__(self) -> str:
        return f"{self.left} {self.op} {self.right}"
