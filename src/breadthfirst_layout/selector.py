"""Minimal node selector engine used to resolve string ``roots``.

Grammar (a pragmatic subset of the host graph query language)::

    selector := group ("," group)*
    group    := [element] term*
    element  := "node" | "*" | "edge"
    term     := "#" ident
              | "." ident
              | "[" ident "]"
              | "[" ident ("=" | "!=") value "]"
              | ":parent" | ":childless"
    value    := quoted-string | number | bare-word

Selectors are permissive: a selector that cannot be parsed, or that targets
edges, simply matches no nodes.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from breadthfirst_layout.graph import LayoutGraph, NodeData

logger = logging.getLogger(__name__)

_IDENT = r"[A-Za-z0-9_\-]+"

_TOKEN_RE = re.compile(
    rf"""
    (?P<id>\#(?P<id_name>(?:\\.|[^\s#.\[\]:,\\])+))
  | (?P<cls>\.(?P<cls_name>{_IDENT}))
  | (?P<attr>\[\s*(?P<attr_name>{_IDENT})\s*
        (?:(?P<op>!=|=)\s*(?P<value>"[^"]*"|'[^']*'|[^\]\s]+)\s*)?\])
  | (?P<pseudo>:(?P<pseudo_name>parent|childless))
    """,
    re.VERBOSE,
)

_ELEMENT_RE = re.compile(r"^\s*(node|edge|\*)?")


@dataclass
class AttrTest:
    """A single ``[name op value]`` test."""

    name: str
    op: str | None = None
    value: Any = None

    def matches(self, node_id: Hashable, data: NodeData) -> bool:
        found, actual = _lookup(node_id, data, self.name)
        if self.op is None:
            return found and actual is not None
        if not found:
            return self.op == "!="
        equal = actual == self.value or str(actual) == str(self.value)
        return equal if self.op == "=" else not equal


@dataclass
class SelectorGroup:
    """One comma-separated alternative of a selector."""

    ids: list[str] = field(default_factory=list)
    classes: list[str] = field(default_factory=list)
    attrs: list[AttrTest] = field(default_factory=list)
    compound: bool | None = None

    def matches(self, node_id: Hashable, data: NodeData, is_compound: bool) -> bool:
        if any(str(node_id) != ident for ident in self.ids):
            return False
        if any(cls not in data.classes for cls in self.classes):
            return False
        if self.compound is not None and self.compound != is_compound:
            return False
        return all(test.matches(node_id, data) for test in self.attrs)


def _lookup(node_id: Hashable, data: NodeData, name: str) -> tuple[bool, Any]:
    if name in data.attrs:
        return True, data.attrs[name]
    if name == "id":
        return True, node_id
    if name in ("label", "width", "height", "parent"):
        return True, getattr(data, name)
    return False, None


def _parse_value(raw: str) -> Any:
    if raw[:1] in ("'", '"') and raw[-1:] == raw[:1]:
        return raw[1:-1]
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def parse_group(text: str) -> SelectorGroup | None:
    """Parse one selector group; returns None for edge groups or syntax errors."""
    head = _ELEMENT_RE.match(text)
    element = head.group(1) if head else None
    if element == "edge":
        return None

    group = SelectorGroup()
    pos = head.end() if head else 0
    rest = text.rstrip()
    while pos < len(rest):
        m = _TOKEN_RE.match(rest, pos)
        if m is None:
            return None
        if m.group("id"):
            group.ids.append(re.sub(r"\\(.)", r"\1", m.group("id_name")))
        elif m.group("cls"):
            group.classes.append(m.group("cls_name"))
        elif m.group("attr"):
            value = _parse_value(m.group("value")) if m.group("op") else None
            group.attrs.append(AttrTest(m.group("attr_name"), m.group("op"), value))
        else:
            group.compound = m.group("pseudo_name") == "parent"
        pos = m.end()

    if element is None and not (group.ids or group.classes or group.attrs or group.compound is not None):
        return None
    return group


def parse_selector(selector: str) -> list[SelectorGroup] | None:
    """Parse a full selector. Returns None when any group is invalid."""
    groups: list[SelectorGroup] = []
    for part in selector.split(","):
        group = parse_group(part)
        if group is None:
            if not part.strip().startswith("edge"):
                return None
            continue
        groups.append(group)
    return groups


def select_nodes(
    graph: LayoutGraph,
    selector: str,
    compounds: set[Hashable] | None = None,
) -> list[Hashable]:
    """Nodes of ``graph`` matched by any group of ``selector``, in enumeration order."""
    groups = parse_selector(selector)
    if groups is None:
        logger.warning(f"Ignoring malformed selector {selector!r}")
        return []

    if compounds is None:
        compounds = graph.compound_ids()
    matched: list[Hashable] = []
    for node_id in graph.digraph.nodes:
        data = graph.node_data(node_id)
        is_compound = node_id in compounds
        if any(group.matches(node_id, data, is_compound) for group in groups):
            matched.append(node_id)
    return matched
