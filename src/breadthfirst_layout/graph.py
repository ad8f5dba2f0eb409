"""Host graph wrapper — the queries the breadthfirst layout needs from a graph.

A ``LayoutGraph`` wraps a networkx ``DiGraph`` (or ``MultiDiGraph``). Each
node may carry a ``NodeData`` under the ``data`` attribute; nodes without one
get default dimensions.

A node is *compound* when some other node names it as its ``parent``.
Compound nodes are containers: they may sit on traversal paths but never
receive a tier or a position.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

import networkx as nx

# Default node body size when the host supplies none.
DEFAULT_NODE_SIZE: float = 30.0

# Label metrics used when a node has label text but no explicit label extent.
LABEL_CHAR_WIDTH: float = 7.0
LABEL_LINE_HEIGHT: float = 14.0


@dataclass
class NodeData:
    """Layout-relevant attributes of a single node."""

    id: str
    width: float = DEFAULT_NODE_SIZE
    height: float = DEFAULT_NODE_SIZE
    label: str = ""
    label_width: float | None = None
    label_height: float | None = None
    parent: str | None = None
    classes: tuple[str, ...] = ()
    attrs: dict[str, Any] = field(default_factory=dict)


def label_dimensions(label: str) -> tuple[int, int]:
    """Compute (max_line_width, line_count) for a label that may contain newlines."""
    if not label:
        return (0, 0)
    lines = label.split("\n")
    max_w = max(len(line) for line in lines)
    return (max_w, len(lines))


_NODE_DATA_KEYS = ("width", "height", "label", "label_width", "label_height", "parent")


def _node_data_from_attrs(node_id: Hashable, attrs: dict[str, Any]) -> NodeData:
    existing = attrs.get("data")
    if isinstance(existing, NodeData):
        return existing

    kwargs = {key: attrs[key] for key in _NODE_DATA_KEYS if attrs.get(key) is not None}
    classes = attrs.get("classes", ())
    if isinstance(classes, str):
        classes = tuple(classes.split())
    extra = {k: v for k, v in attrs.items() if k not in _NODE_DATA_KEYS and k not in ("classes", "data")}
    return NodeData(id=node_id, classes=tuple(classes), attrs=extra, **kwargs)


class LayoutGraph:
    """Read-only view over a networkx directed graph for layout purposes.

    Attributes:
        digraph: The underlying ``nx.DiGraph`` / ``nx.MultiDiGraph``. Edge
            orientation is the host's source → target orientation; undirected
            layouts simply ignore it.
    """

    def __init__(self, digraph: nx.DiGraph) -> None:
        if not digraph.is_directed():
            raise TypeError("LayoutGraph needs a directed graph; use LayoutGraph.from_networkx for undirected input")
        self.digraph = digraph

    # ─── Construction ─────────────────────────────────────────────────────

    @classmethod
    def from_edges(cls, *edges: tuple[str, str], nodes: Iterable[str | NodeData] = ()) -> LayoutGraph:
        """Build a graph from (src, tgt) pairs plus optional extra nodes.

        ``nodes`` entries may be plain ids or ``NodeData``; they are added
        first so that they lead the enumeration order.
        """
        g: nx.DiGraph = nx.DiGraph()
        for node in nodes:
            if isinstance(node, NodeData):
                g.add_node(node.id, data=node)
            else:
                g.add_node(node)
        for src, tgt in edges:
            g.add_edge(src, tgt)
        return cls(g)

    @classmethod
    def from_networkx(cls, graph: nx.Graph) -> LayoutGraph:
        """Wrap any networkx graph, normalising node attributes into ``NodeData``.

        Undirected graphs are converted edge by edge, keeping each edge's
        stored (u, v) orientation rather than adding both directions.
        """
        if graph.is_multigraph():
            g: nx.DiGraph = nx.MultiDiGraph()
        else:
            g = nx.DiGraph()
        for node_id, attrs in graph.nodes(data=True):
            g.add_node(node_id, data=_node_data_from_attrs(node_id, attrs))
        for src, tgt, attrs in graph.edges(data=True):
            g.add_edge(src, tgt, **attrs)
        return cls(g)

    # ─── Node queries ─────────────────────────────────────────────────────

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.digraph

    def __len__(self) -> int:
        return self.digraph.number_of_nodes()

    def node_data(self, node_id: Hashable) -> NodeData:
        """Return the ``NodeData`` of a node, synthesising defaults when absent.

        Raises ``KeyError`` for ids that are not in the graph.
        """
        attrs = self.digraph.nodes[node_id]
        return _node_data_from_attrs(node_id, attrs)

    def compound_ids(self) -> set[Hashable]:
        """Ids of every node that some other node names as its parent."""
        parents: set[Hashable] = set()
        for node_id in self.digraph.nodes:
            parent = self.node_data(node_id).parent
            if parent is not None and parent != node_id and parent in self.digraph:
                parents.add(parent)
        return parents

    def is_compound(self, node_id: Hashable) -> bool:
        return node_id in self.compound_ids()

    def layout_nodes(self, compounds: set[Hashable] | None = None) -> list[Hashable]:
        """Non-compound nodes in graph enumeration order.

        Pass ``compounds`` when the caller already holds ``compound_ids()``.
        """
        if compounds is None:
            compounds = self.compound_ids()
        return [n for n in self.digraph.nodes if n not in compounds]

    def get_element_by_id(self, node_id: Hashable) -> Hashable | None:
        return node_id if node_id in self.digraph else None

    def layout_dimensions(self, node_id: Hashable, include_labels: bool = False) -> tuple[float, float]:
        """Footprint (width, height) of a node as seen by the layout.

        With ``include_labels`` the label box (stacked on the node body) is
        folded in: width is the wider of body and label, height is the sum.
        """
        data = self.node_data(node_id)
        if not include_labels:
            return (data.width, data.height)

        max_line_w, line_count = label_dimensions(data.label)
        label_w = data.label_width if data.label_width is not None else max_line_w * LABEL_CHAR_WIDTH
        label_h = data.label_height if data.label_height is not None else line_count * LABEL_LINE_HEIGHT
        return (max(data.width, label_w), data.height + label_h)

    # ─── Connectivity queries ─────────────────────────────────────────────

    def degree(self, node_id: Hashable) -> int:
        """Undirected degree, counting multi-edges and ignoring self-loops."""
        g = self.digraph
        loops = g.number_of_edges(node_id, node_id)
        return g.in_degree(node_id) + g.out_degree(node_id) - 2 * loops

    def incomers(self, node_id: Hashable) -> list[Hashable]:
        """Sources of incoming edges, deduplicated, in adjacency order."""
        return list(self.digraph.predecessors(node_id))

    def has_incomer(self, node_id: Hashable, among: set[Hashable]) -> bool:
        """Whether any node of ``among`` other than ``node_id`` has an edge into it."""
        return any(src != node_id and src in among for src in self.digraph.predecessors(node_id))

    def neighborhood(self, node_id: Hashable) -> list[Hashable]:
        """Adjacent nodes in either direction, successors first, without duplicates."""
        seen: dict[Hashable, None] = {}
        for nb in self.digraph.successors(node_id):
            seen.setdefault(nb, None)
        for nb in self.digraph.predecessors(node_id):
            seen.setdefault(nb, None)
        return list(seen)

    def components(self) -> list[list[Hashable]]:
        """Weakly connected components of the whole graph, compounds included.

        Components are ordered by their first node in enumeration order, and
        members keep enumeration order too.
        """
        order = {n: i for i, n in enumerate(self.digraph.nodes)}
        comps = [sorted(comp, key=order.__getitem__) for comp in nx.weakly_connected_components(self.digraph)]
        comps.sort(key=lambda comp: order[comp[0]])
        return comps

    def strong_components(self) -> dict[Hashable, int]:
        """Map each node to the index of its strongly connected component."""
        membership: dict[Hashable, int] = {}
        for idx, comp in enumerate(nx.strongly_connected_components(self.digraph)):
            for node_id in comp:
                membership[node_id] = idx
        return membership

    def bfs_layers(self, roots: list[Hashable], directed: bool) -> Iterator[list[Hashable]]:
        """Multi-source breadth-first layers starting from ``roots``.

        Directed traversal follows successors only; undirected traversal
        walks an undirected copy whose adjacency keeps edge insertion order.
        """
        return nx.bfs_layers(self.digraph if directed else self.undirected(), list(roots))

    def undirected(self) -> nx.Graph:
        """Structure-only undirected copy (no attributes), in enumeration order."""
        g: nx.Graph = nx.MultiGraph() if self.digraph.is_multigraph() else nx.Graph()
        g.add_nodes_from(self.digraph.nodes)
        g.add_edges_from(self.digraph.edges())
        return g

    # ─── Selection ────────────────────────────────────────────────────────

    def select(self, selector: str) -> list[Hashable]:
        """Nodes matching a selector string, in enumeration order."""
        from breadthfirst_layout.selector import select_nodes

        return select_nodes(self, selector)
