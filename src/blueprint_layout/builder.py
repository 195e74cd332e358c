"""Tree builders — declarative plans and random demo trees.

A plan is a nested mapping::

    {"kind": "task", "mode": "C", "children": [
        {"kind": "task", "mode": "P", "children": [{"kind": "job"}, {"kind": "job"}]},
        {"kind": "job"},
    ]}

``kind`` defaults to a composite when ``children`` is present and to a leaf
otherwise. Composite modes are left unset when omitted; the layout pass
reports them.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from typing import Any

from blueprint_layout.errors import InvalidTreeError
from blueprint_layout.tree import Node, Tree
from blueprint_layout.types import ExecMode, NodeKind

logger = logging.getLogger(__name__)

# Sequential root running two parallel tasks of two jobs each.
DEFAULT_PLAN: dict[str, Any] = {
    "kind": "task",
    "mode": "C",
    "children": [
        {"kind": "task", "mode": "P", "children": [{"kind": "job"}, {"kind": "job"}]},
        {"kind": "task", "mode": "P", "children": [{"kind": "job"}, {"kind": "job"}]},
    ],
}


# ─── Declarative Plans ────────────────────────────────────────────────────────


def _node_args(plan: Mapping[str, Any]) -> tuple[NodeKind, ExecMode | None, list[Any]]:
    if not isinstance(plan, Mapping):
        raise InvalidTreeError(f"Plan entries must be mappings, got {type(plan).__name__}")

    children = plan.get("children") or []
    if not isinstance(children, list):
        raise InvalidTreeError(f"Plan 'children' must be a list, got {type(children).__name__}")

    default_kind = NodeKind.Composite if "children" in plan else NodeKind.Leaf
    kind = NodeKind.parse(plan.get("kind", default_kind))
    if kind is NodeKind.Leaf and children:
        raise InvalidTreeError("Leaf entries cannot have children")

    mode = plan.get("mode")
    return kind, ExecMode.parse(mode) if mode is not None else None, children


def build_tree(plan: Mapping[str, Any], tree: Tree | None = None) -> Tree:
    """Build a tree from a nested plan mapping.

    Ids are assigned in pre-order, matching the order the entries appear.
    When ``tree`` is given it must not have a root yet.
    """
    tree = tree if tree is not None else Tree()
    kind, mode, children = _node_args(plan)
    root = tree.create_root(kind, mode)

    # Explicit stack keeps deep plans clear of the recursion limit.
    stack: list[tuple[Node, Any]] = [(root, entry) for entry in reversed(children)]
    while stack:
        parent, entry = stack.pop()
        kind, mode, grandchildren = _node_args(entry)
        child = parent.append_child(kind, mode)
        stack.extend((child, grandchild) for grandchild in reversed(grandchildren))

    return tree


# ─── Random Demo Trees ────────────────────────────────────────────────────────

TASK_PROBABILITY: float = 0.7


def _random_mode(rng: random.Random) -> ExecMode:
    return ExecMode.Parallel if rng.random() < 0.5 else ExecMode.Sequential


def random_tree(seed: int | None = None, rounds: int = 5, rng: random.Random | None = None) -> Tree:
    """Generate a random blueprint for demos.

    Each round picks an existing task and gives it two or three new nodes,
    each a task with probability ``TASK_PROBABILITY`` and a job otherwise.
    Tasks left without children become jobs, so the result is always valid
    input for ``analyze``.
    """
    rng = rng if rng is not None else random.Random(seed)
    tree = Tree()
    root = tree.create_root(NodeKind.Composite, _random_mode(rng))
    tasks: list[Node] = [root]
    node_count = 1

    for _round in range(rounds):
        parent = tasks[rng.randrange(len(tasks))]
        for _ in range(rng.randint(2, 3)):
            is_task = rng.random() < TASK_PROBABILITY
            kind = NodeKind.Composite if is_task else NodeKind.Leaf
            child = parent.append_child(kind, _random_mode(rng) if is_task else None)
            node_count += 1
            if is_task:
                tasks.append(child)

    for task in tasks:
        if not task.children:
            task.kind = NodeKind.Leaf
            task.exec_mode = None

    logger.debug("Generated random blueprint (seed=%r, rounds=%d, nodes=%d)", seed, rounds, node_count)
    return tree
