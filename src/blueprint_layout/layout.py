"""Layout module — nested-box grid layout for blueprint trees.

Phases:
  1. Barrier insertion (synthetic join/fork nodes between parallel siblings)
  2. Size pass (bottom-up over the reversed pre-order list)
  3. Position pass (top-down over the pre-order list)

Sequential composites lay their children out side by side along the width
axis; parallel composites stack them along the height axis.
"""

from __future__ import annotations

from blueprint_layout.errors import InvalidTreeError
from blueprint_layout.tree import Node, Tree
from blueprint_layout.types import ExecMode, Geometry, NodeKind

# ─── Barrier Insertion ────────────────────────────────────────────────────────

BARRIER_SIZE: int = 1


def _needs_barrier(first: Node, second: Node) -> bool:
    """Both siblings are parallel composites with more than one child."""
    return all(
        node.kind is NodeKind.Composite and node.exec_mode is ExecMode.Parallel and len(node.children) > 1
        for node in (first, second)
    )


def make_barrier(parent: Node) -> Node:
    """Create a detached barrier node owned by ``parent`` (not yet in its children)."""
    return Node(
        kind=NodeKind.Barrier,
        id=None,
        level=parent.level + 1,
        geometry=Geometry(width=BARRIER_SIZE, height=BARRIER_SIZE),
        parent=parent,
        tree=parent.tree,
    )


def insert_barriers(tree: Tree) -> list[Node]:
    """Interpose a barrier between adjacent multi-child parallel siblings.

    Only sequential composites are scanned, using the current flattened
    snapshot. The original children keep their relative order; barriers are
    spliced in directly rather than created through ``Tree.create_node`` and
    never receive an id. Call ``tree.flatten()`` again afterwards.

    Returns:
        The inserted barrier nodes, in tree order.
    """
    inserted: list[Node] = []
    for node in tree.nodes:
        if node.kind is not NodeKind.Composite or node.exec_mode is not ExecMode.Sequential:
            continue

        new_children: list[Node] = []
        for i, child in enumerate(node.children):
            new_children.append(child)
            nxt = node.children[i + 1] if i + 1 < len(node.children) else None
            if nxt is not None and _needs_barrier(child, nxt):
                barrier = make_barrier(node)
                new_children.append(barrier)
                inserted.append(barrier)
        node.children = new_children

    return inserted


# ─── Size Pass ────────────────────────────────────────────────────────────────


def compute_sizes(nodes: list[Node]) -> None:
    """Assign width/height to every node, children before parents.

    ``nodes`` must be a pre-order list, so walking it backwards visits every
    child before its parent. Positions are reset to the origin here and set
    by :func:`compute_positions`.

    Raises:
        InvalidTreeError: a composite has no children.
        InvalidModeError: a composite has no valid execution mode.
    """
    for node in reversed(nodes):
        if node.kind is not NodeKind.Composite:
            node.geometry = Geometry(left=0, top=0, width=1, height=1)
            continue

        mode = node.require_mode()
        if not node.children:
            raise InvalidTreeError(f"Composite node {node.label} has no children")

        widths = [child.width for child in node.children]
        heights = [child.height for child in node.children]
        if mode is ExecMode.Sequential:
            width, height = sum(widths), max(heights)
        else:
            width, height = max(widths), sum(heights)
        node.geometry = Geometry(left=0, top=0, width=width, height=height)


# ─── Position Pass ────────────────────────────────────────────────────────────


def compute_positions(nodes: list[Node]) -> None:
    """Place every child at a cursor walking its parent's layout axis.

    ``nodes`` must be pre-order with sizes already computed. The first node
    (the root) stays at (0, 0).
    """
    for node in nodes:
        if not node.children:
            continue

        box = node.require_geometry()
        mode = node.require_mode()
        left, top = box.left, box.top
        for child in node.children:
            child_box = child.require_geometry()
            child_box.left = left
            child_box.top = top
            if mode is ExecMode.Sequential:
                left += child_box.width
            else:
                top += child_box.height


def layout_tree(tree: Tree) -> Geometry:
    """Run both layout passes over ``tree.nodes`` and return the root box."""
    nodes = tree.nodes
    if not nodes:
        raise InvalidTreeError("Tree has no flattened nodes; call flatten() first")
    compute_sizes(nodes)
    compute_positions(nodes)
    return nodes[0].require_geometry()
