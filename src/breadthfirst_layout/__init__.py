"""Breadthfirst layout: deterministic tiered placement of graph nodes.

Nodes are bucketed into depth tiers by a breadth-first traversal and placed
as stacked rows or concentric rings.
"""

from __future__ import annotations

from breadthfirst_layout.graph import (
    DEFAULT_NODE_SIZE,
    LABEL_CHAR_WIDTH,
    LABEL_LINE_HEIGHT,
    LayoutGraph,
    NodeData,
    label_dimensions,
)
from breadthfirst_layout.layout import (
    BreadthfirstLayout,
    DepthAssignment,
    apply_positions,
    assign_tiers,
    breadthfirst_layout,
    collect_orphans,
    compute_positions,
    correct_directed_depths,
    min_node_distance,
    resolve_roots,
    sort_by_connectivity,
    sort_tier,
    weighted_position,
)
from breadthfirst_layout.options import (
    DEFAULT_SPACING_FACTOR,
    DEFAULT_VIEWPORT,
    BoundingBox,
    LayoutOptions,
    identity_transform,
)
from breadthfirst_layout.sinks import GraphAttributeSink, PositionSink, RecordingSink
from breadthfirst_layout.types import LayoutNode, Point, TierSlot

__all__ = [
    "DEFAULT_NODE_SIZE",
    "DEFAULT_SPACING_FACTOR",
    "DEFAULT_VIEWPORT",
    "LABEL_CHAR_WIDTH",
    "LABEL_LINE_HEIGHT",
    "BoundingBox",
    "BreadthfirstLayout",
    "DepthAssignment",
    "GraphAttributeSink",
    "LayoutGraph",
    "LayoutNode",
    "LayoutOptions",
    "NodeData",
    "Point",
    "PositionSink",
    "RecordingSink",
    "TierSlot",
    "apply_positions",
    "assign_tiers",
    "breadthfirst_layout",
    "collect_orphans",
    "compute_positions",
    "correct_directed_depths",
    "identity_transform",
    "label_dimensions",
    "min_node_distance",
    "resolve_roots",
    "sort_by_connectivity",
    "sort_tier",
    "weighted_position",
]
