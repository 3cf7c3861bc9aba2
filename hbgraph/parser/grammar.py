"""
Parser for safety property predicates.

Implements a grammar with proper precedence and associativity rules
to parse predicate strings into an abstract syntax tree (AST).
"""

from __future__ import annotations

from typing import Optional

import sly

from hbgraph.core.event import EventKind
from hbgraph.parser.ast_nodes import (
    FIELDS,
    FUTURE,
    TRIGGER,
    And,
    BoolConstant,
    CausalRelation,
    ClockEntry,
    Comparison,
    Field,
    Implies,
    KindLiteral,
    Literal,
    Not,
    Or,
    Predicate,
)
from hbgraph.parser.lexer import PredicateLexer


class ParseError(Exception):
    """Exception raised for parsing errors."""

    pass


class _SLYParser(sly.Parser):
    """
    SLY-based parser for predicates.

    Precedence (lowest to highest):
        1. ->   (implication, right-to-left)
        2. |    (disjunction, left-to-right)
        3. &    (conjunction, left-to-right)
        4. !    (negation, right-to-left)

    Comparisons and causal relations are atomic and do not chain.
    """

    tokens = PredicateLexer.tokens
    start = "expr"

    precedence = (
        ("right", IMPLIES),
        ("left", OR),
        ("left", AND),
        ("right", NOT),
    )

    # --- Boolean structure ---

    @_("expr IMPLIES expr")
    def expr(self, p):
        return Implies(p.expr0, p.expr1)

    @_("expr OR expr")
    def expr(self, p):
        return Or(p.expr0, p.expr1)

    @_("expr AND expr")
    def expr(self, p):
        return And(p.expr0, p.expr1)

    @_("NOT expr")
    def expr(self, p):
        return Not(p.expr)

    @_("LPAREN expr RPAREN")
    def expr(self, p):
        return p.expr

    @_("TRUE")
    def expr(self, p):
        return BoolConstant(True)

    @_("FALSE")
    def expr(self, p):
        return BoolConstant(False)

    # --- Atoms ---

    @_("term cmp term")
    def expr(self, p):
        return Comparison(p.cmp, p.term0, p.term1)

    @_("subject HB subject")
    def expr(self, p):
        return CausalRelation("hb", p.subject0, p.subject1)

    @_("subject CONCURRENT subject")
    def expr(self, p):
        return CausalRelation("concurrent", p.subject0, p.subject1)

    @_("EQ", "NE", "LT", "LE", "GT", "GE")
    def cmp(self, p):
        # Normalise unicode and single '=' spellings.
        return {
            "=": "==", "≠": "!=", "≤": "<=", "≥": ">=",
        }.get(p[0], p[0])

    # --- Terms ---

    @_("NUMBER")
    def term(self, p):
        return Literal(p.NUMBER)

    @_("STRING")
    def term(self, p):
        return Literal(p.STRING)

    @_("SEND")
    def term(self, p):
        return KindLiteral(EventKind.SEND)

    @_("RECEIVE")
    def term(self, p):
        return KindLiteral(EventKind.RECEIVE)

    @_("field")
    def term(self, p):
        return p.field

    @_("NAME")
    def field(self, p):
        return _make_field(p.NAME, None)

    @_("subject DOT NAME")
    def field(self, p):
        return _make_field(p.NAME, p.subject)

    @_("CLOCK LBRACKET proc_name RBRACKET")
    def field(self, p):
        return ClockEntry(p.proc_name)

    @_("subject DOT CLOCK LBRACKET proc_name RBRACKET")
    def field(self, p):
        return ClockEntry(p.proc_name, p.subject)

    @_("NAME", "STRING")
    def proc_name(self, p):
        return p[0]

    @_("TRIGGER")
    def subject(self, p):
        return TRIGGER

    @_("FUTURE")
    def subject(self, p):
        return FUTURE

    def error(self, token):
        if token:
            raise ParseError(
                f"Syntax error at '{token.value}' " f"(type: {token.type}, index: {token.index})"
            )
        raise ParseError("Syntax error: unexpected end of predicate")


def _make_field(name: str, subject: Optional[str]) -> Field:
    if name not in FIELDS:
        raise ParseError(
            f"Unknown field '{name}' (expected one of {sorted(FIELDS)} or clock[P])"
        )
    return Field(name, subject)


class PredicateParser:
    """
    Parser for safety property predicates.

    Wraps the SLY-based parser with a clean public interface.
    Converts predicate strings into AST nodes.
    """

    def __init__(self) -> None:
        self._lexer = PredicateLexer()
        self._parser = _SLYParser()

    def parse(self, text: str) -> Predicate:
        """
        Parse a predicate string into an AST.

        Args:
            text: The predicate string to parse.

        Returns:
            The root Predicate node of the AST.

        Raises:
            LexerError: If the predicate contains an invalid character.
            ParseError: If the predicate is syntactically invalid.
        """
        text = text.strip()
        if not text:
            raise ParseError("Syntax error: empty predicate")

        result = self._parser.parse(self._lexer.tokenize(text))
        if result is None:
            raise ParseError("Syntax error: could not parse predicate")
        return result
