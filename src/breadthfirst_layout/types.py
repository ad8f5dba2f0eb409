"""Layout types shared by the layout pipeline and position sinks."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass


@dataclass
class Point:
    """A 2D point in layout coordinates."""

    x: float
    y: float


@dataclass
class TierSlot:
    """Where a node currently sits: its tier (depth) and index within the tier."""

    depth: int
    index: int


@dataclass
class LayoutNode:
    """A positioned node in the layout."""

    id: Hashable
    depth: int
    index: int
    x: float
    y: float
    width: float
    height: float
