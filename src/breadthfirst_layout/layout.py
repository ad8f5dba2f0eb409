"""Layout module — breadthfirst (tiered) graph layout pipeline.

Phases:
  1. Root resolution
  2. Depth assignment (multi-source breadth-first traversal)
  3. Orphan collection (nodes no root reaches)
  4. Directed depth correction (directed mode only)
  5. Minimum node distance (overlap avoidance)
  6. Connectivity sort within each tier
  7. Coordinate assignment (stacked rows or concentric rings)
  8. Position application (spacing factor, transform hook, sink)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Hashable, Iterable

import networkx as nx

from breadthfirst_layout.graph import LayoutGraph
from breadthfirst_layout.options import BoundingBox, LayoutOptions, PositionTransform, RootSpec
from breadthfirst_layout.selector import select_nodes
from breadthfirst_layout.sinks.base import PositionSink
from breadthfirst_layout.types import LayoutNode, Point, TierSlot

logger = logging.getLogger(__name__)

# ─── Root Resolution ──────────────────────────────────────────────────────────


def resolve_roots(
    graph: LayoutGraph,
    directed: bool,
    roots: RootSpec = None,
    compounds: set[Hashable] | None = None,
) -> list[Hashable]:
    """Determine the nodes breadth-first traversal starts from.

    Explicit roots are taken as given: a set of node ids (kept in graph
    enumeration order), a list of ids (kept in list order, unknown ids
    skipped) or a selector string. Without explicit roots:

    - directed: every node with no incoming edge from another node;
    - undirected: per connected component of the whole graph, every node of
      maximal degree. Compound nodes take part in the components and the
      maximum, but are dropped from the result.

    Compound nodes are never roots. The result has no duplicates.
    """
    if compounds is None:
        compounds = graph.compound_ids()

    if isinstance(roots, (set, frozenset)):
        found = [n for n in graph.digraph.nodes if n in roots]
    elif isinstance(roots, str):
        found = select_nodes(graph, roots, compounds)
    elif isinstance(roots, (list, tuple)):
        found = [n for n in (graph.get_element_by_id(r) for r in roots) if n is not None]
    elif roots is not None:
        raise TypeError(f"roots must be a set, list, tuple or selector string, not {type(roots).__name__}")
    elif directed:
        layout_nodes = graph.layout_nodes(compounds)
        layout_set = set(layout_nodes)
        found = [n for n in layout_nodes if not graph.has_incomer(n, layout_set)]
    else:
        found = []
        for comp in graph.components():
            degrees = {n: graph.degree(n) for n in comp}
            max_degree = max(degrees.values())
            found.extend(n for n in comp if degrees[n] == max_degree)

    resolved = [n for n in dict.fromkeys(found) if n not in compounds]
    logger.debug(f"Resolved {len(resolved)} root(s) (directed={directed}, explicit={roots is not None})")
    return resolved


# ─── Depth Assignment ─────────────────────────────────────────────────────────


class DepthAssignment:
    """Side table of tier slots plus the ordered tiers themselves.

    ``tiers[d]`` lists the nodes at depth ``d`` in display order. A node
    moved to another tier leaves a ``None`` tombstone behind; ``compact``
    drops tombstones (and tiers left empty) and renumbers every slot so
    that indices within a tier are contiguous from 0.

    Attributes:
        tiers: Node ids per depth, possibly holding tombstones until compacted.
        slots: Maps node id → its current ``TierSlot``.
    """

    def __init__(self) -> None:
        self.tiers: list[list[Hashable | None]] = []
        self.slots: dict[Hashable, TierSlot] = {}

    @classmethod
    def from_bfs(
        cls,
        graph: LayoutGraph,
        roots: list[Hashable],
        directed: bool,
        compounds: set[Hashable] | None = None,
    ) -> DepthAssignment:
        """Bucket every node reachable from ``roots`` by its traversal depth.

        Compound nodes may carry the traversal from one node to the next but
        are never placed in a tier.
        """
        assignment = cls()
        if compounds is None:
            compounds = graph.compound_ids()

        for depth, layer in enumerate(graph.bfs_layers(roots, directed)):
            while len(assignment.tiers) <= depth:
                assignment.tiers.append([])
            for node_id in layer:
                if node_id not in compounds:
                    assignment.add(node_id, depth)

        logger.debug(f"Traversal found {len(assignment.slots)} node(s) over {len(assignment.tiers)} tier(s)")
        return assignment

    @property
    def tier_count(self) -> int:
        return len(self.tiers)

    @property
    def max_tier_size(self) -> int:
        return max((len(tier) for tier in self.tiers), default=0)

    def found(self, node_id: Hashable) -> bool:
        return node_id in self.slots

    def add(self, node_id: Hashable, depth: int) -> None:
        """Append a node to the end of tier ``depth``, creating tiers as needed."""
        while len(self.tiers) <= depth:
            self.tiers.append([])
        tier = self.tiers[depth]
        self.slots[node_id] = TierSlot(depth=depth, index=len(tier))
        tier.append(node_id)

    def change_depth(self, node_id: Hashable, new_depth: int) -> None:
        """Move a node to the end of another tier, tombstoning its old slot."""
        slot = self.slots[node_id]
        self.tiers[slot.depth][slot.index] = None
        self.add(node_id, new_depth)

    def compact_tier(self, depth: int) -> None:
        """Drop tombstones from one tier and renumber its slots."""
        tier = [n for n in self.tiers[depth] if n is not None]
        self.tiers[depth] = tier
        for index, node_id in enumerate(tier):
            self.slots[node_id] = TierSlot(depth=depth, index=index)

    def compact(self) -> None:
        """Compact every tier, removing tiers that end up empty."""
        self.tiers = [tier for tier in ([n for n in t if n is not None] for t in self.tiers) if tier]
        for depth in range(len(self.tiers)):
            self.compact_tier(depth)

    def prepend(self, tier: Iterable[Hashable]) -> None:
        """Insert a new tier at depth 0, shifting every other tier down by one."""
        self.tiers.insert(0, list(tier))
        self.compact()

    def as_lists(self) -> list[list[Hashable]]:
        """Snapshot of the tiers without tombstones."""
        return [[n for n in tier if n is not None] for tier in self.tiers]


# ─── Orphan Collection ────────────────────────────────────────────────────────


def collect_orphans(layout_nodes: Iterable[Hashable], assignment: DepthAssignment) -> list[Hashable]:
    """Nodes the traversal never reached, in enumeration order."""
    return [n for n in layout_nodes if not assignment.found(n)]


# ─── Directed Depth Correction ────────────────────────────────────────────────


def correct_directed_depths(
    graph: LayoutGraph,
    assignment: DepthAssignment,
    compounds: set[Hashable] | None = None,
) -> int:
    """Push nodes below their incoming neighbours so directed edges point down.

    Tiers are walked from shallow to deep; a node whose depth is not greater
    than the deepest recorded source of its incoming edges is appended to
    the tier just below that source. Moved nodes are revisited when the walk
    reaches their new tier. Incoming edges from compound nodes, from
    unrecorded nodes, and from the node's own strongly connected component
    are ignored, so cycles cannot push nodes down forever.

    The assignment is compacted afterwards. Returns the number of moves.
    """
    if compounds is None:
        compounds = graph.compound_ids()
    component = graph.strong_components()
    moves = 0

    depth = 0
    while depth < len(assignment.tiers):
        tier = assignment.tiers[depth]
        for index in range(len(tier)):
            node_id = tier[index]
            if node_id is None:
                continue

            max_incomer_depth = -1
            for src in graph.incomers(node_id):
                if src in compounds or component[src] == component[node_id]:
                    continue
                src_slot = assignment.slots.get(src)
                if src_slot is not None:
                    max_incomer_depth = max(max_incomer_depth, src_slot.depth)

            if depth <= max_incomer_depth:
                assignment.change_depth(node_id, max_incomer_depth + 1)
                moves += 1
        depth += 1

    assignment.compact()
    logger.debug(f"Directed correction moved {moves} node(s)")
    return moves


# ─── Overlap Avoidance ────────────────────────────────────────────────────────


def min_node_distance(
    graph: LayoutGraph,
    layout_nodes: Iterable[Hashable],
    avoid_overlap: bool,
    include_labels: bool = False,
) -> float:
    """Largest footprint side over all nodes, or 0 when overlap is allowed."""
    if not avoid_overlap:
        return 0.0
    min_distance = 0.0
    for node_id in layout_nodes:
        w, h = graph.layout_dimensions(node_id, include_labels)
        min_distance = max(min_distance, w, h)
    return min_distance


# ─── Connectivity Sort ────────────────────────────────────────────────────────


def weighted_position(
    graph: LayoutGraph,
    assignment: DepthAssignment,
    node_id: Hashable,
    layout_set: set[Hashable],
) -> float:
    """Average relative position (0..1) of a node's neighbours in shallower tiers.

    Each neighbour at a smaller depth contributes ``index / (size - 1)`` of
    its own tier, or 0 when that tier holds a single node. Nodes without
    such neighbours get 0, which places them at the start of their tier.
    """
    depth = assignment.slots[node_id].depth
    percent = 0.0
    samples = 0

    for nb in graph.neighborhood(node_id):
        if nb not in layout_set:
            continue
        nb_slot = assignment.slots.get(nb)
        if nb_slot is None or nb_slot.depth >= depth:
            continue

        tier_size = len(assignment.tiers[nb_slot.depth])
        if tier_size > 1:
            percent += nb_slot.index / (tier_size - 1)
        samples += 1

    if samples == 0:
        return 0.0
    return percent / samples


def sort_tier(
    graph: LayoutGraph,
    assignment: DepthAssignment,
    depth: int,
    layout_set: set[Hashable],
) -> None:
    """Order one tier by weighted position, ties by ascending id, then renumber it."""
    cache: dict[Hashable, float] = {}

    def sort_key(node_id: Hashable) -> tuple[float, str]:
        if node_id not in cache:
            cache[node_id] = weighted_position(graph, assignment, node_id, layout_set)
        return (cache[node_id], str(node_id))

    assignment.tiers[depth] = sorted(assignment.tiers[depth], key=sort_key)
    assignment.compact_tier(depth)


def sort_by_connectivity(graph: LayoutGraph, assignment: DepthAssignment, layout_set: set[Hashable]) -> None:
    """Sort every tier, shallowest first, so connected nodes sit close together.

    Each tier is sorted against the tiers above it as they stand after their
    own sort; this is a single pass, not iterated to a fixed point.
    """
    for depth in range(assignment.tier_count):
        sort_tier(graph, assignment, depth, layout_set)


# ─── Coordinate Assignment ────────────────────────────────────────────────────


def compute_positions(
    assignment: DepthAssignment,
    bb: BoundingBox,
    min_distance: float = 0.0,
    circle: bool = False,
    grid: bool = False,
) -> dict[Hashable, Point]:
    """Map every (depth, index) slot to an (x, y) position.

    Linear mode centres each tier horizontally on the box centre and stacks
    tiers downward at even intervals; ``grid`` spaces every tier as if it
    were as wide as the widest one. Circular mode puts tier ``d`` on a ring
    of radius ``(d + 1) * step``, pulled in by half a step when the first
    tier is sparse; a lone node in the first tier sits at radius 1.

    Spacing never drops below ``min_distance``.
    """
    tier_count = assignment.tier_count
    if tier_count == 0:
        return {}

    # y-centre is offset by x1, not y1.
    center = Point(x=bb.x1 + bb.width / 2, y=bb.x1 + bb.height / 2)
    max_tier_size = assignment.max_tier_size
    first_tier_size = len(assignment.tiers[0])

    distance_y = max(bb.height / (tier_count + 1), min_distance)
    radius_step = max(min(bb.width / 2, bb.height / 2) / tier_count, min_distance)

    positions: dict[Hashable, Point] = {}
    for depth, tier in enumerate(assignment.tiers):
        depth_size = len(tier)
        distance_x = max(bb.width / ((max_tier_size if grid else depth_size) + 1), min_distance)

        for index, node_id in enumerate(tier):
            if not circle:
                positions[node_id] = Point(
                    x=center.x + (index + 1 - (depth_size + 1) / 2) * distance_x,
                    y=(depth + 1) * distance_y,
                )
                continue

            radius = radius_step * depth + radius_step
            if first_tier_size <= 3:
                radius -= radius_step / 2
            if depth == 0 and first_tier_size == 1:
                radius = 1.0
            theta = 2 * math.pi / depth_size * index

            positions[node_id] = Point(
                x=center.x + radius * math.cos(theta),
                y=center.y + radius * math.sin(theta),
            )

    return positions


# ─── Position Application ─────────────────────────────────────────────────────


def apply_positions(
    node_order: Iterable[Hashable],
    positions: dict[Hashable, Point],
    spacing_factor: float = 1.0,
    transform: PositionTransform | None = None,
) -> dict[Hashable, Point]:
    """Scale positions by ``spacing_factor`` about their joint centre, then transform.

    Scaling runs after the minimum node distance has been applied, so a
    factor below 1 can bring nodes closer than that distance.

    Returns a new mapping in ``node_order`` order; ``positions`` is not modified.
    """
    order = [n for n in node_order if n in positions]

    scaled: dict[Hashable, Point] = {n: positions[n] for n in order}
    if order and spacing_factor != 1:
        xs = [p.x for p in scaled.values()]
        ys = [p.y for p in scaled.values()]
        cx = (min(xs) + max(xs)) / 2
        cy = (min(ys) + max(ys)) / 2
        scaled = {
            n: Point(x=cx + (p.x - cx) * spacing_factor, y=cy + (p.y - cy) * spacing_factor)
            for n, p in scaled.items()
        }

    if transform is None:
        return scaled
    return {n: transform(n, p) for n, p in scaled.items()}


# ─── Full Layout Pipeline ─────────────────────────────────────────────────────


def assign_tiers(
    graph: LayoutGraph,
    options: LayoutOptions,
    compounds: set[Hashable] | None = None,
) -> DepthAssignment:
    """Run phases 1–4 and 6: the final, compacted tier assignment (orphans first)."""
    if compounds is None:
        compounds = graph.compound_ids()
    layout_nodes = graph.layout_nodes(compounds)
    layout_set = set(layout_nodes)

    roots = resolve_roots(graph, options.directed, options.roots, compounds)
    assignment = DepthAssignment.from_bfs(graph, roots, options.directed, compounds)
    orphans = collect_orphans(layout_nodes, assignment)

    if options.directed:
        correct_directed_depths(graph, assignment, compounds)
    assignment.compact()

    sort_by_connectivity(graph, assignment, layout_set)

    if orphans:
        logger.debug(f"Placing {len(orphans)} orphan node(s) in the leading tier")
        assignment.prepend(orphans)
        sort_tier(graph, assignment, 0, layout_set)

    return assignment


class BreadthfirstLayout:
    """Tiered layout engine: breadth-first depths as rows or rings.

    Usage::

        engine = BreadthfirstLayout(LayoutOptions(directed=True))
        nodes = engine.run(graph, sink=RecordingSink())
    """

    def __init__(self, options: LayoutOptions | None = None) -> None:
        self.options = options if options is not None else LayoutOptions()

    def layout(self, graph: LayoutGraph | nx.Graph) -> list[LayoutNode]:
        """Compute final positions for every non-compound node, in enumeration order."""
        if not isinstance(graph, LayoutGraph):
            graph = LayoutGraph.from_networkx(graph)
        options = self.options

        compounds = graph.compound_ids()
        assignment = assign_tiers(graph, options, compounds)
        layout_nodes = graph.layout_nodes(compounds)

        min_distance = min_node_distance(
            graph,
            layout_nodes,
            options.avoid_overlap,
            options.node_dimensions_include_labels,
        )
        logger.debug(f"Minimum node distance {min_distance}")

        raw = compute_positions(
            assignment,
            options.resolve_bounding_box(),
            min_distance,
            circle=options.circle,
            grid=options.grid,
        )
        final = apply_positions(layout_nodes, raw, options.spacing_factor, options.transform)

        result: list[LayoutNode] = []
        for node_id in layout_nodes:
            slot = assignment.slots[node_id]
            width, height = graph.layout_dimensions(node_id, options.node_dimensions_include_labels)
            point = final[node_id]
            result.append(
                LayoutNode(
                    id=node_id,
                    depth=slot.depth,
                    index=slot.index,
                    x=point.x,
                    y=point.y,
                    width=width,
                    height=height,
                )
            )
        return result

    def run(self, graph: LayoutGraph | nx.Graph, sink: PositionSink | None = None) -> list[LayoutNode]:
        """Lay out ``graph`` and hand each position to ``sink`` once per node."""
        nodes = self.layout(graph)
        if sink is not None:
            for ln in nodes:
                sink.apply(ln.id, Point(x=ln.x, y=ln.y))
        return nodes


def breadthfirst_layout(graph: LayoutGraph | nx.Graph, **options: object) -> list[LayoutNode]:
    """Convenience wrapper: build ``LayoutOptions`` from keywords and lay out ``graph``.

    Keywords may use snake_case or camelCase option names (``spacingFactor``).
    """
    return BreadthfirstLayout(LayoutOptions.from_dict(options)).layout(graph)
