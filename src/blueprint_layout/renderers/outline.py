"""Outline renderer — indented text view of a blueprint tree."""

from __future__ import annotations

from blueprint_layout.tree import Node, Tree
from blueprint_layout.types import ExecMode, NodeKind

EXEC_ICONS: dict[ExecMode, str] = {
    ExecMode.Sequential: "→",
    ExecMode.Parallel: "∥",
}

KIND_LABELS: dict[NodeKind, str] = {
    NodeKind.Leaf: "JOB",
    NodeKind.Composite: "TASK",
    NodeKind.Barrier: "BARRIER",
}

INDENT = "  "


def format_node(node: Node) -> str:
    """One outline line, e.g. ``3: TASK ∥`` or ``*: BARRIER``."""
    label = "*" if node.id is None else str(node.id)
    line = f"{label}: {KIND_LABELS[node.kind]}"
    if node.kind is NodeKind.Composite and node.exec_mode in EXEC_ICONS:
        line += f" {EXEC_ICONS[node.exec_mode]}"
    return line


class OutlineRenderer:
    """Plain-text renderer listing nodes in pre-order, indented by level."""

    def render(self, tree: Tree) -> str:
        return "\n".join(f"{INDENT * node.level}{format_node(node)}" for node in tree.nodes)
