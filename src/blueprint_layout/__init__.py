"""Layout and dependency-link resolution for hierarchical execution plans."""

from blueprint_layout.api import analyze, render_outline, render_svg
from blueprint_layout.builder import DEFAULT_PLAN, build_tree, random_tree
from blueprint_layout.errors import BlueprintError, InvalidModeError, InvalidTreeError
from blueprint_layout.tree import Node, Tree
from blueprint_layout.types import ExecMode, Geometry, Link, NodeKind

__all__ = [
    "DEFAULT_PLAN",
    "BlueprintError",
    "ExecMode",
    "Geometry",
    "InvalidModeError",
    "InvalidTreeError",
    "Link",
    "Node",
    "NodeKind",
    "Tree",
    "analyze",
    "build_tree",
    "random_tree",
    "render_outline",
    "render_svg",
]
