"""
Lexical analyzer for safety property predicates.

Tokenizes predicate strings into a stream of tokens (field names,
literals, comparison and boolean operators, causal relations and
delimiters) that can be consumed by the parser.
"""

from __future__ import annotations

import sly


class LexerError(Exception):
    """Exception raised for lexical analysis errors."""
    pass


class PredicateLexer(sly.Lexer):
    """
    Lexical analyzer for safety property predicates.

    Token Types:
        TRUE, FALSE                 - Boolean constants
        NUMBER, STRING              - Integer and quoted string literals
        SEND, RECEIVE               - Event kind literals
        NAME                        - Field and process identifiers
        TRIGGER, FUTURE             - Event subjects
        CLOCK                       - Vector clock accessor
        NOT, AND, OR, IMPLIES       - Boolean operators
        EQ, NE, LT, LE, GT, GE      - Comparison operators
        HB, CONCURRENT              - Causal relations
        DOT, LPAREN, RPAREN, LBRACKET, RBRACKET - Delimiters
    """

    tokens = {
        TRUE, FALSE,
        NUMBER, STRING,
        SEND, RECEIVE,
        NAME,
        TRIGGER, FUTURE, CLOCK,
        NOT, AND, OR, IMPLIES,
        EQ, NE, LT, LE, GT, GE,
        HB, CONCURRENT,
        DOT, LPAREN, RPAREN, LBRACKET, RBRACKET,
    }

    # Ignored characters
    ignore = " \t"

    @_(r"\n+")
    def ignore_newline(self, t):
        self.lineno += len(t.value)

    # Ignore comments (# to end of line)
    ignore_comment = r"\#[^\n]*"

    # Multi-character operators (order matters — longer patterns first)

    # -> must come before anything starting with '-'
    IMPLIES = r"->|→"

    EQ = r"=="
    NE = r"!=|≠"
    LE = r"<=|≤"
    GE = r">=|≥"
    LT = r"<"
    GT = r">"

    # && must come before &
    AND = r"&&|∧"

    # || must come before |
    OR = r"\|\||∨"

    # Single-character operators and delimiters
    NOT = r"!|¬"
    DOT = r"\."
    LPAREN = r"\("
    RPAREN = r"\)"
    LBRACKET = r"\["
    RBRACKET = r"\]"

    @_(r"=")
    def EQ_SINGLE(self, t):
        t.type = "EQ"
        return t

    @_(r"&")
    def AND_SINGLE(self, t):
        t.type = "AND"
        return t

    @_(r"\|")
    def OR_SINGLE(self, t):
        t.type = "OR"
        return t

    @_(r"\d+")
    def NUMBER(self, t):
        t.value = int(t.value)
        return t

    @_(r"\"[^\"\n]*\"|'[^'\n]*'")
    def STRING(self, t):
        t.value = t.value[1:-1]
        return t

    # Identifiers and keywords
    @_(r"[a-zA-Z_][a-zA-Z0-9_]*")
    def NAME(self, t):
        # Only exact matches are keywords; longer words are names.
        keywords = {
            "true": "TRUE",
            "TRUE": "TRUE",
            "false": "FALSE",
            "FALSE": "FALSE",
            "not": "NOT",
            "and": "AND",
            "or": "OR",
            "implies": "IMPLIES",
            "hb": "HB",
            "concurrent": "CONCURRENT",
            "trigger": "TRIGGER",
            "future": "FUTURE",
            "clock": "CLOCK",
            "send": "SEND",
            "receive": "RECEIVE",
            "recv": "RECEIVE",
        }
        t.type = keywords.get(t.value, "NAME")
        return t

    def error(self, t):
        """Handle invalid characters."""
        raise LexerError(
            f"Invalid character '{t.value[0]}' at index {self.index}"
        )
