"""Shared types for blueprint trees: node kinds, execution modes, geometry, links."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from blueprint_layout.errors import InvalidModeError

if TYPE_CHECKING:
    from blueprint_layout.tree import Node


class NodeKind(Enum):
    """Closed set of node kinds. Only composites own children."""

    Leaf = "leaf"
    Composite = "composite"
    Barrier = "barrier"

    @classmethod
    def parse(cls, value: NodeKind | str) -> NodeKind:
        """Accept a NodeKind or its text form (``job``/``task`` are aliases)."""
        if isinstance(value, NodeKind):
            return value
        key = str(value).strip().lower()
        kind = _KIND_ALIASES.get(key)
        if kind is None:
            raise InvalidModeError(f"Unknown node kind: {value!r}")
        return kind


class ExecMode(Enum):
    """Execution mode of a composite: children side by side or stacked."""

    Sequential = "sequential"
    Parallel = "parallel"

    @classmethod
    def parse(cls, value: ExecMode | str) -> ExecMode:
        """Accept an ExecMode or its text form (``C``/``P`` are aliases)."""
        if isinstance(value, ExecMode):
            return value
        key = str(value).strip().lower()
        mode = _MODE_ALIASES.get(key)
        if mode is None:
            raise InvalidModeError(f"Unknown execution mode: {value!r}")
        return mode


# Barriers are synthetic; they are never parsed from input.
_KIND_ALIASES: dict[str, NodeKind] = {
    "leaf": NodeKind.Leaf,
    "job": NodeKind.Leaf,
    "composite": NodeKind.Composite,
    "task": NodeKind.Composite,
}

_MODE_ALIASES: dict[str, ExecMode] = {
    "sequential": ExecMode.Sequential,
    "seq": ExecMode.Sequential,
    "c": ExecMode.Sequential,
    "parallel": ExecMode.Parallel,
    "par": ExecMode.Parallel,
    "p": ExecMode.Parallel,
}


@dataclass
class Geometry:
    """A box on the layout grid, in grid units."""

    left: int = 0
    top: int = 0
    width: int = 1
    height: int = 1

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def contains(self, other: Geometry) -> bool:
        """True when ``other`` lies entirely inside this box."""
        return (
            self.left <= other.left
            and self.top <= other.top
            and other.right <= self.right
            and other.bottom <= self.bottom
        )


@dataclass(frozen=True)
class Link:
    """Directed dependency edge: ``src`` completes before ``dst`` starts.

    Endpoints are node references, not ids, because barriers carry no id.
    Nodes compare by identity, so two links are equal only when they join
    the very same pair of nodes.
    """

    src: Node
    dst: Node

    def to_dict(self) -> dict[str, Any]:
        """Endpoint ids plus their ``ref`` handles (the only name a barrier has)."""
        return {
            "src": self.src.id,
            "dst": self.dst.id,
            "src_ref": self.src.ref,
            "dst_ref": self.dst.ref,
        }
