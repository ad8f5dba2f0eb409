"""Layout configuration: bounding boxes and breadthfirst layout options."""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Union

from breadthfirst_layout.types import Point

logger = logging.getLogger(__name__)

DEFAULT_SPACING_FACTOR: float = 1.75
DEFAULT_VIEWPORT: tuple[float, float] = (800.0, 600.0)


def identity_transform(node_id: Hashable, position: Point) -> Point:
    """Default position transform: returns the position unchanged."""
    return position


PositionTransform = Callable[[Hashable, Point], Point]

# Accepted forms of ``roots``: node set, id list, selector string or None.
RootSpec = Union[set, frozenset, list, tuple, str, None]


@dataclass
class BoundingBox:
    """Axis-aligned box constraining the layout: origin plus extent."""

    x1: float
    y1: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Bounding box extent must be non-negative, got {self.width}x{self.height}")

    @property
    def x2(self) -> float:
        return self.x1 + self.width

    @property
    def y2(self) -> float:
        return self.y1 + self.height

    @classmethod
    def from_mapping(cls, bb: Mapping[str, float]) -> BoundingBox:
        """Build from ``{x1, y1, x2, y2}`` or ``{x1, y1, w, h}``.

        ``width``/``height`` are accepted as aliases of ``w``/``h``.
        """
        if isinstance(bb, BoundingBox):
            return bb
        if bb.get("x1") is None or bb.get("y1") is None:
            raise ValueError(f"Bounding box needs x1 and y1: {dict(bb)!r}")
        x1, y1 = bb["x1"], bb["y1"]

        x2, y2 = bb.get("x2"), bb.get("y2")
        if x2 is not None and y2 is not None:
            return cls(x1=x1, y1=y1, width=x2 - x1, height=y2 - y1)

        w = bb.get("w", bb.get("width"))
        h = bb.get("h", bb.get("height"))
        if w is not None and h is not None:
            return cls(x1=x1, y1=y1, width=w, height=h)

        raise ValueError(f"Bounding box needs either x2/y2 or w/h: {dict(bb)!r}")

    @classmethod
    def from_viewport(cls, viewport: tuple[float, float]) -> BoundingBox:
        width, height = viewport
        return cls(x1=0.0, y1=0.0, width=width, height=height)


# camelCase option keys → LayoutOptions field names.
_CAMEL_KEYS: dict[str, str] = {
    "spacingFactor": "spacing_factor",
    "boundingBox": "bounding_box",
    "avoidOverlap": "avoid_overlap",
    "nodeDimensionsIncludeLabels": "node_dimensions_include_labels",
}

# Options that only concern the renderer; accepted and ignored.
RENDERER_OPTIONS: frozenset[str] = frozenset(
    {"fit", "padding", "animate", "animationDuration", "animationEasing", "animateFilter", "ready", "stop"}
)


@dataclass
class LayoutOptions:
    """Options recognised by the breadthfirst layout.

    Attributes:
        directed: Traverse along edge direction only and push every edge
            target below its sources.
        circle: Place tiers on concentric rings instead of stacked rows.
        grid: Use the widest tier's spacing for every row (linear mode only).
        spacing_factor: Positions are scaled by this factor about the centre
            of their bounding box before the transform is applied. Scaling
            follows overlap avoidance, so a factor below 1 shrinks gaps
            below the node footprint ``avoid_overlap`` would keep.
        bounding_box: Explicit box; when None the viewport box is used.
        avoid_overlap: Keep node centres at least one node footprint apart.
        node_dimensions_include_labels: Fold label extent into footprints.
        roots: Node set, id list, selector string, or None for automatic.
        transform: Final per-node position hook.
        viewport: Size of the viewport used when no bounding box is given.
    """

    directed: bool = False
    circle: bool = False
    grid: bool = False
    spacing_factor: float = DEFAULT_SPACING_FACTOR
    bounding_box: BoundingBox | Mapping[str, float] | None = None
    avoid_overlap: bool = True
    node_dimensions_include_labels: bool = False
    roots: RootSpec = None
    transform: PositionTransform = field(default=identity_transform)
    viewport: tuple[float, float] = DEFAULT_VIEWPORT

    def __post_init__(self) -> None:
        if self.spacing_factor <= 0:
            raise ValueError(f"spacing_factor must be positive, got {self.spacing_factor!r}")
        if self.bounding_box is not None:
            self.bounding_box = BoundingBox.from_mapping(self.bounding_box)
        if self.transform is None:
            self.transform = identity_transform

    def resolve_bounding_box(self) -> BoundingBox:
        if self.bounding_box is not None:
            return self.bounding_box
        return BoundingBox.from_viewport(self.viewport)

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> LayoutOptions:
        """Build options from a mapping using either camelCase or snake_case keys."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            if key in RENDERER_OPTIONS:
                logger.warning(f"Layout option {key!r} only affects rendering and is ignored")
                continue
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown layout option: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

