"""
Core analysis engine for HBGRAPH.

Contains the fundamental data structures and algorithms for causal
analysis: vector clocks, events, traces, the causal graph and its
builder, topological ordering, transitive reduction, safety checking
and the analysis orchestrator.
"""
