"""
HBGRAPH: Happens-Before Graph analyzer.

Builds the happens-before graph of a distributed execution trace from
its events' vector clocks, reduces it to direct causal dependencies,
and checks safety properties over the causal future of trigger events.
"""

__version__ = "0.1.0"
