"""
Tests for causal graph visualization.

Tests cover DOT output structure, ASCII rendering, JSON export, and
file saving by suffix.
"""

import json
import shutil
from pathlib import Path

import pytest

from hbgraph.core.causal_graph import CausalGraph, CausalGraphBuilder
from hbgraph.core.reduction import reduce_graph
from hbgraph.core.trace import Trace
from hbgraph.utils.visualization import GraphVisualizer


@pytest.fixture
def chain_graph(chain_trace: Trace) -> CausalGraph:
    graph = CausalGraphBuilder().build(chain_trace)
    reduce_graph(graph)
    return graph


# ---------------------------------------------------------------------------
# Tests: DOT
# ---------------------------------------------------------------------------


class TestDotOutput:
    """Test DOT format generation."""

    def test_single_digraph_block(self, chain_graph: CausalGraph) -> None:
        dot = GraphVisualizer(chain_graph).to_dot()
        assert dot.startswith("digraph CausalGraph {")
        assert dot.endswith("}")
        assert dot.count("digraph") == 1

    def test_node_labels(self, chain_graph: CausalGraph) -> None:
        dot = GraphVisualizer(chain_graph).to_dot()
        assert '0 [label="SEND:A\\n<A:1, B:0>\\nmsg 0"' in dot
        assert '1 [label="RECV:B\\n<A:1, B:1>\\nmsg 0"];' in dot

    def test_each_edge_once(self, chain_graph: CausalGraph) -> None:
        lines = GraphVisualizer(chain_graph).to_dot().splitlines()
        edges = [line.strip() for line in lines if "->" in line]
        assert edges == ["0 -> 1;", "1 -> 2;"]

    def test_custom_name(self, chain_graph: CausalGraph) -> None:
        assert GraphVisualizer(chain_graph, name="G").to_dot().startswith("digraph G {")

    def test_empty_graph(self) -> None:
        dot = GraphVisualizer(CausalGraph([])).to_dot()
        assert "->" not in dot
        assert dot.endswith("}")


# ---------------------------------------------------------------------------
# Tests: ASCII and JSON
# ---------------------------------------------------------------------------


class TestAsciiOutput:
    """Test ASCII adjacency listing."""

    def test_lists_nodes_and_edges(self, chain_graph: CausalGraph) -> None:
        text = GraphVisualizer(chain_graph).to_ascii()
        lines = text.splitlines()
        assert lines[0] == "=== Causal Graph ==="
        assert "[e-0] Msg-0 SEND on A, VClock: <A:1, B:0>" in lines
        assert "  --> [e-1] RECV:B" in lines
        assert "  --> [e-2] SEND:B" in lines

    def test_truncation(self, chain_graph: CausalGraph) -> None:
        text = GraphVisualizer(chain_graph).to_ascii(max_width=20)
        assert all(len(line) <= 20 for line in text.splitlines())


class TestJsonOutput:
    """Test JSON export."""

    def test_structure(self, chain_graph: CausalGraph) -> None:
        data = json.loads(GraphVisualizer(chain_graph).to_json())
        assert data["edges"] == [
            {"source": 0, "target": 1},
            {"source": 1, "target": 2},
        ]
        assert data["nodes"][1] == {
            "id": 1,
            "kind": "receive",
            "process": "B",
            "clock": {"A": 1, "B": 1},
            "msg": 0,
        }


# ---------------------------------------------------------------------------
# Tests: Saving
# ---------------------------------------------------------------------------


class TestSave:
    """Test file output."""

    def test_save_dot(self, chain_graph: CausalGraph, tmp_path: Path) -> None:
        path = tmp_path / "g.dot"
        GraphVisualizer(chain_graph).save(path)
        assert path.read_text().startswith("digraph")

    def test_save_json(self, chain_graph: CausalGraph, tmp_path: Path) -> None:
        path = tmp_path / "g.json"
        GraphVisualizer(chain_graph).save(path)
        assert len(json.loads(path.read_text())["nodes"]) == 3

    def test_unknown_suffix_writes_dot(self, chain_graph: CausalGraph, tmp_path: Path) -> None:
        path = tmp_path / "g.gv"
        GraphVisualizer(chain_graph).save(path)
        assert path.read_text().startswith("digraph")

    @pytest.mark.skipif(shutil.which("dot") is None, reason="Graphviz not installed")
    def test_save_png(self, chain_graph: CausalGraph, tmp_path: Path) -> None:
        path = tmp_path / "g.png"
        GraphVisualizer(chain_graph).save_png(path)
        assert path.read_bytes().startswith(b"\x89PNG")

    @pytest.mark.skipif(shutil.which("dot") is not None, reason="Graphviz installed")
    def test_missing_graphviz(self, chain_graph: CausalGraph, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError, match="Graphviz"):
            GraphVisualizer(chain_graph).save(tmp_path / "g.svg")
