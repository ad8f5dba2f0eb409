"""Tests for selector.py — string root selectors."""

from __future__ import annotations

import logging

import pytest

from breadthfirst_layout.graph import LayoutGraph, NodeData
from breadthfirst_layout.selector import AttrTest, parse_group, parse_selector, select_nodes


@pytest.fixture
def graph() -> LayoutGraph:
    """A → B, A → C; C lives inside compound P."""
    return LayoutGraph.from_edges(
        ("A", "B"),
        ("A", "C"),
        nodes=[
            NodeData("A", label="Start", attrs={"kind": "root", "weight": 3}),
            NodeData("B", classes=("leaf",)),
            NodeData("C", classes=("leaf", "big"), parent="P"),
            NodeData("P"),
        ],
    )


class TestParse:
    def test_id_group(self):
        group = parse_group("#A")
        assert group is not None
        assert group.ids == ["A"]

    def test_compound_group(self):
        group = parse_group("node.leaf[kind = 'root']:childless")
        assert group is not None
        assert group.classes == ["leaf"]
        assert group.attrs == [AttrTest("kind", "=", "root")]
        assert group.compound is False

    def test_numeric_value(self):
        group = parse_group("[weight = 2.5]")
        assert group is not None
        assert group.attrs[0].value == 2.5

    def test_escaped_id(self):
        group = parse_group(r"#a\.b")
        assert group is not None
        assert group.ids == ["a.b"]

    def test_edge_group_is_none(self):
        assert parse_group("edge") is None

    def test_garbage_is_none(self):
        assert parse_group("%%%") is None
        assert parse_selector("#A, %%%") is None

    def test_empty_group_is_invalid(self):
        assert parse_selector("#A,") is None


class TestSelectNodes:
    @pytest.mark.parametrize(
        "selector,expected",
        [
            ("#A", ["A"]),
            ("#A, #C", ["A", "C"]),
            ("#C, #A", ["A", "C"]),
            ("node#B", ["B"]),
            (".leaf", ["B", "C"]),
            (".leaf.big", ["C"]),
            ("[kind = 'root']", ["A"]),
            ('[kind = "root"]', ["A"]),
            ("[kind = root]", ["A"]),
            ("[weight = 3]", ["A"]),
            ("[kind]", ["A"]),
            ("[kind != 'root']", ["B", "C", "P"]),
            ("[label = 'Start']", ["A"]),
            ("[parent = 'P']", ["C"]),
            (":parent", ["P"]),
            (":childless", ["A", "B", "C"]),
            ("node", ["A", "B", "C", "P"]),
            ("*", ["A", "B", "C", "P"]),
            ("#Z", []),
            ("edge", []),
        ],
    )
    def test_matches(self, graph, selector, expected):
        assert select_nodes(graph, selector) == expected

    def test_graph_select_delegates(self, graph):
        assert graph.select(".big") == ["C"]

    def test_malformed_selector_warns(self, graph, caplog):
        with caplog.at_level(logging.WARNING, logger="breadthfirst_layout.selector"):
            assert select_nodes(graph, "%%%") == []
        assert "malformed selector" in caplog.text
