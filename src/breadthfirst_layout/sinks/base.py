"""Base position sink protocol."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Protocol

from breadthfirst_layout.types import Point


class PositionSink(Protocol):
    """Protocol for anything that receives final node positions."""

    def apply(self, node_id: Hashable, position: Point) -> None:
        """Receive the final position of one node."""
        ...


class RecordingSink:
    """Keeps every applied position in memory, in application order."""

    def __init__(self) -> None:
        self.positions: dict[Hashable, Point] = {}

    def apply(self, node_id: Hashable, position: Point) -> None:
        self.positions[node_id] = position
