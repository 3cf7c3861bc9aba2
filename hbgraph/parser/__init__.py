"""
Safety property parser for HBGRAPH.

Provides lexical analysis, parsing, and AST construction for the
predicate language used in safety property preconditions and
postconditions, plus loading of property files.
"""
