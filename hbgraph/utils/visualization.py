"""
Visualization utilities for causal graphs.

Generates DOT (Graphviz), ASCII adjacency and JSON renderings of a
causal graph, and renders images through the Graphviz ``dot`` binary
when it is installed.
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, List

from hbgraph.core.causal_graph import CausalGraph


class GraphVisualizer:
    """
    Visualizer for causal graphs.

    Nodes are events, labeled with their kind, process and vector
    clock; edges are the graph's (normally reduced) happens-before
    edges.

    Attributes:
        graph: The causal graph to visualize.
        name: Graph name used in the DOT header.
    """

    #: Output formats the ``dot`` binary is asked to render.
    IMAGE_FORMATS = ("png", "svg", "pdf")

    def __init__(self, graph: CausalGraph, name: str = "CausalGraph") -> None:
        """
        Initialize with a causal graph.

        Args:
            graph: The CausalGraph to visualize.
            name: Graph name for the DOT header.
        """
        self.graph = graph
        self.name = name

    def to_dot(self) -> str:
        """
        Generate DOT format string for Graphviz rendering.

        One node statement per event, labeled ``KIND:process`` above the
        clock, and one ``u -> v`` statement per edge.

        Returns:
            A DOT format string.
        """
        lines: List[str] = [f"digraph {self.name} {{"]
        lines.append("  rankdir=TB;")
        lines.append("  node [shape=box, style=filled, fillcolor=lightyellow];")

        for eid, event in enumerate(self.graph.events):
            label = f"{event.kind.label}:{event.process}\\n{event.clock}"
            if event.message_id is not None:
                label += f"\\nmsg {event.message_id}"
            style = ", fillcolor=lightblue" if event.is_send() else ""
            lines.append(f'  {eid} [label="{label}"{style}];')

        for u, v in self.graph.edge_list():
            lines.append(f"  {u} -> {v};")

        lines.append("}")
        return "\n".join(lines)

    def to_ascii(self, max_width: int = 80) -> str:
        """
        Generate an ASCII adjacency listing of the graph.

        Args:
            max_width: Maximum line width.

        Returns:
            ASCII art string.
        """
        lines: List[str] = []
        lines.append("=== Causal Graph ===")
        lines.append("")

        for eid, event in enumerate(self.graph.events):
            label = f"[e-{eid}] {event.describe()}"
            if len(label) > max_width:
                label = label[: max_width - 3] + "..."
            lines.append(label)

            for target in self.graph.successors(eid):
                other = self.graph.events[target]
                edge_label = f"  --> [e-{target}] {other.kind.label}:{other.process}"
                if len(edge_label) > max_width:
                    edge_label = edge_label[: max_width - 3] + "..."
                lines.append(edge_label)

        return "\n".join(lines)

    def to_json(self) -> str:
        """
        Generate JSON representation of the graph.

        Returns:
            A JSON string with nodes and edges.
        """
        nodes: List[Dict[str, Any]] = []
        for eid, event in enumerate(self.graph.events):
            nodes.append(
                {
                    "id": eid,
                    "kind": event.kind.value,
                    "process": event.process,
                    "clock": dict(sorted(event.clock.clock.items())),
                    "msg": event.message_id,
                }
            )

        edges: List[Dict[str, Any]] = [
            {"source": u, "target": v} for u, v in self.graph.edge_list()
        ]

        return json.dumps({"nodes": nodes, "edges": edges}, indent=2)

    def save(self, filepath: Path) -> None:
        """
        Save the graph, choosing the format from the file suffix.

        ``.json`` writes JSON, ``.png``/``.svg``/``.pdf`` render through
        Graphviz, anything else writes DOT.

        Args:
            filepath: Destination path.
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower().lstrip(".")
        if suffix == "json":
            filepath.write_text(self.to_json())
        elif suffix in self.IMAGE_FORMATS:
            self.render(filepath, suffix)
        else:
            self.save_dot(filepath)

    def save_dot(self, filepath: Path) -> None:
        """
        Save DOT format to a file.

        Args:
            filepath: Path to write the DOT file.
        """
        Path(filepath).write_text(self.to_dot())

    def save_png(self, filepath: Path) -> None:
        """
        Render graph to PNG using Graphviz.

        Args:
            filepath: Path to write the PNG file.
        """
        self.render(filepath, "png")

    def render(self, filepath: Path, fmt: str) -> None:
        """
        Render the graph with Graphviz ``dot``.

        Args:
            filepath: Path to write the image.
            fmt: Output format passed to ``dot -T``.

        Raises:
            RuntimeError: If Graphviz is missing or fails.
        """
        dot_content = self.to_dot()
        try:
            result = subprocess.run(
                ["dot", f"-T{fmt}", "-o", str(filepath)],
                input=dot_content,
                capture_output=True,
                text=True,
                timeout=30,
            )
            if result.returncode != 0:
                raise RuntimeError(f"Graphviz error: {result.stderr}")
        except FileNotFoundError:
            raise RuntimeError(
                "Graphviz 'dot' command not found. "
                f"Install Graphviz to render {fmt.upper()} files."
            )
