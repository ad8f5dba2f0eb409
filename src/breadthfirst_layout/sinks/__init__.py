"""Position sinks: where final layout positions are delivered."""

from __future__ import annotations

from breadthfirst_layout.sinks.base import PositionSink, RecordingSink
from breadthfirst_layout.sinks.graph_attrs import POS_ATTR, GraphAttributeSink

__all__ = [
    "POS_ATTR",
    "GraphAttributeSink",
    "PositionSink",
    "RecordingSink",
]
