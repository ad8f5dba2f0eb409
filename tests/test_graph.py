"""Tests for graph.py — the LayoutGraph query surface and NodeData helpers."""

from __future__ import annotations

import networkx as nx
import pytest

from breadthfirst_layout.graph import (
    DEFAULT_NODE_SIZE,
    LABEL_CHAR_WIDTH,
    LABEL_LINE_HEIGHT,
    LayoutGraph,
    NodeData,
    label_dimensions,
)

# ─── label_dimensions Tests ───────────────────────────────────────────────────


class TestLabelDimensions:
    def test_empty_label(self):
        """Empty label → no extent at all."""
        assert label_dimensions("") == (0, 0)

    def test_single_line(self):
        assert label_dimensions("Hello") == (5, 1)

    def test_multiline(self):
        w, h = label_dimensions("Hello\nWorld\nLonger line")
        assert h == 3
        assert w == len("Longer line")


# ─── Construction Tests ───────────────────────────────────────────────────────


class TestConstruction:
    def test_from_edges_enumeration_order(self):
        g = LayoutGraph.from_edges(("B", "A"), nodes=["Z"])
        assert list(g.digraph.nodes) == ["Z", "B", "A"]
        assert len(g) == 3
        assert "A" in g

    def test_rejects_undirected_graph(self):
        with pytest.raises(TypeError):
            LayoutGraph(nx.Graph())

    def test_from_networkx_keeps_edge_orientation(self):
        """Undirected input becomes one directed edge per stored edge, not two."""
        g = LayoutGraph.from_networkx(nx.path_graph(3))
        assert sorted(g.digraph.edges()) == [(0, 1), (1, 2)]

    def test_from_networkx_reads_attributes(self):
        src = nx.Graph()
        src.add_node("A", width=80, label="Alpha", classes="big leaf", kind="root")
        g = LayoutGraph.from_networkx(src)
        data = g.node_data("A")
        assert data.width == 80
        assert data.height == DEFAULT_NODE_SIZE
        assert data.label == "Alpha"
        assert data.classes == ("big", "leaf")
        assert data.attrs == {"kind": "root"}

    def test_from_networkx_multigraph(self):
        src = nx.MultiGraph([("A", "B"), ("A", "B")])
        g = LayoutGraph.from_networkx(src)
        assert g.digraph.is_multigraph()
        assert g.degree("A") == 2

    def test_node_data_defaults(self):
        g = LayoutGraph.from_edges(("A", "B"))
        data = g.node_data("A")
        assert data == NodeData(id="A")

    def test_node_data_unknown_id(self):
        g = LayoutGraph.from_edges(("A", "B"))
        with pytest.raises(KeyError):
            g.node_data("Z")


# ─── Compound Tests ───────────────────────────────────────────────────────────


class TestCompounds:
    def test_parent_is_compound(self):
        g = LayoutGraph.from_edges(nodes=[NodeData("A", parent="P"), "P", "B"])
        assert g.compound_ids() == {"P"}
        assert g.is_compound("P")
        assert not g.is_compound("A")
        assert g.layout_nodes() == ["A", "B"]

    def test_missing_parent_ignored(self):
        """A parent id that is not a node of the graph does not make anything compound."""
        g = LayoutGraph.from_edges(nodes=[NodeData("A", parent="ghost")])
        assert g.compound_ids() == set()
        assert g.layout_nodes() == ["A"]

    def test_layout_nodes_with_precomputed_compounds(self):
        g = LayoutGraph.from_edges(("A", "B"), ("B", "C"))
        assert g.layout_nodes({"B"}) == ["A", "C"]

    def test_components_include_compounds(self):
        """Compound P links c and d into one component and counts toward degree."""
        g = LayoutGraph.from_edges(("P", "c"), ("P", "d"), nodes=[NodeData("a", parent="P")])
        assert g.components() == [["a"], ["P", "c", "d"]]
        assert g.degree("P") == 2


# ─── Dimension Tests ──────────────────────────────────────────────────────────


class TestLayoutDimensions:
    def test_body_only(self):
        g = LayoutGraph.from_edges(nodes=[NodeData("A", width=40, height=20, label="Long label")])
        assert g.layout_dimensions("A") == (40, 20)

    def test_label_from_text(self):
        g = LayoutGraph.from_edges(nodes=[NodeData("A", width=40, height=20, label="Long label\nx")])
        w, h = g.layout_dimensions("A", include_labels=True)
        assert w == 10 * LABEL_CHAR_WIDTH
        assert h == 20 + 2 * LABEL_LINE_HEIGHT

    def test_explicit_label_extent(self):
        g = LayoutGraph.from_edges(nodes=[NodeData("A", width=40, height=20, label_width=10, label_height=5)])
        assert g.layout_dimensions("A", include_labels=True) == (40, 25)

    def test_no_label(self):
        g = LayoutGraph.from_edges(nodes=[NodeData("A", width=40, height=20)])
        assert g.layout_dimensions("A", include_labels=True) == (40, 20)


# ─── Connectivity Tests ───────────────────────────────────────────────────────


class TestConnectivity:
    def test_degree_counts_both_directions(self):
        g = LayoutGraph.from_edges(("A", "B"), ("C", "A"))
        assert g.degree("A") == 2

    def test_degree_ignores_self_loops(self):
        g = LayoutGraph.from_edges(("A", "A"), ("A", "B"))
        assert g.degree("A") == 1

    def test_degree_counts_multi_edges(self):
        mg = nx.MultiDiGraph([("A", "B"), ("A", "B"), ("B", "A")])
        g = LayoutGraph(mg)
        assert g.degree("A") == 3

    def test_incomers(self):
        g = LayoutGraph.from_edges(("A", "C"), ("B", "C"), ("C", "D"))
        assert g.incomers("C") == ["A", "B"]

    def test_has_incomer_ignores_self_and_outsiders(self):
        g = LayoutGraph.from_edges(("A", "A"), ("P", "A"))
        assert not g.has_incomer("A", {"A"})
        assert g.has_incomer("A", {"A", "P"})

    def test_neighborhood_without_duplicates(self):
        g = LayoutGraph.from_edges(("A", "B"), ("B", "A"), ("C", "A"))
        assert g.neighborhood("A") == ["B", "C"]

    def test_components_in_enumeration_order(self):
        g = LayoutGraph.from_edges(("D", "E"), ("A", "B"), ("C", "B"))
        assert g.components() == [["D", "E"], ["A", "B", "C"]]

    def test_strong_components(self):
        g = LayoutGraph.from_edges(("A", "B"), ("B", "A"), ("B", "C"))
        comp = g.strong_components()
        assert comp["A"] == comp["B"]
        assert comp["A"] != comp["C"]

    def test_bfs_layers_directed(self):
        g = LayoutGraph.from_edges(("A", "B"), ("C", "B"))
        assert list(g.bfs_layers(["B"], directed=True)) == [["B"]]

    def test_bfs_layers_undirected(self):
        g = LayoutGraph.from_edges(("A", "B"), ("C", "B"))
        assert list(g.bfs_layers(["B"], directed=False)) == [["B"], ["A", "C"]]

    def test_get_element_by_id(self):
        g = LayoutGraph.from_edges(("A", "B"))
        assert g.get_element_by_id("A") == "A"
        assert g.get_element_by_id("Z") is None
