"""
Supporting utilities for HBGRAPH: trace I/O, trace generation,
graph visualization and structured logging.
"""
