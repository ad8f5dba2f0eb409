"""Sink that writes positions back onto networkx node attributes."""

from __future__ import annotations

from collections.abc import Hashable

import networkx as nx

from breadthfirst_layout.graph import LayoutGraph
from breadthfirst_layout.types import Point

# Attribute holding an (x, y) tuple, the form nx.draw(..., pos=...) expects.
POS_ATTR = "pos"


class GraphAttributeSink:
    """Stores ``pos=(x, y)`` plus ``x`` and ``y`` on each node of a graph.

    Works with a bare networkx graph or a ``LayoutGraph`` (its ``digraph``).
    Nodes missing from the graph raise ``KeyError``.
    """

    def __init__(self, graph: nx.Graph | LayoutGraph) -> None:
        self.graph = graph.digraph if isinstance(graph, LayoutGraph) else graph

    def apply(self, node_id: Hashable, position: Point) -> None:
        attrs = self.graph.nodes[node_id]
        attrs[POS_ATTR] = (position.x, position.y)
        attrs["x"] = position.x
        attrs["y"] = position.y

    def positions(self) -> dict[Hashable, tuple[float, float]]:
        """All stored positions, as accepted by ``nx.draw(graph, pos=...)``."""
        return nx.get_node_attributes(self.graph, POS_ATTR)
