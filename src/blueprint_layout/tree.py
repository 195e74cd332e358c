"""Blueprint tree model — nodes, the owning tree, traversal and flattening.

A blueprint is a tree of composite task nodes (sequential or parallel) and
terminal job nodes. The tree owns the id counter, the flattened pre-order
snapshot used by every later pass, and the resolved link list.

``children`` is the only ownership edge. ``parent`` and ``tree`` are plain
back-references, excluded from equality and repr.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import networkx as nx

from blueprint_layout.errors import InvalidModeError, InvalidTreeError
from blueprint_layout.types import ExecMode, Geometry, Link, NodeKind

# ─── Node ─────────────────────────────────────────────────────────────────────


@dataclass(eq=False)
class Node:
    """One element of a blueprint tree.

    Nodes compare and hash by identity so they can be used directly as link
    endpoints and graph nodes, including barriers which have no id.
    """

    kind: NodeKind
    exec_mode: ExecMode | None = None
    id: int | None = None
    level: int = 0
    geometry: Geometry | None = None
    ref: int | None = field(default=None, repr=False)
    parent: Node | None = field(default=None, repr=False)
    tree: Tree | None = field(default=None, repr=False)
    children: list[Node] = field(default_factory=list, repr=False)

    @property
    def label(self) -> str:
        """Display label: the id, or ``barrier`` for synthetic nodes."""
        return "barrier" if self.id is None else str(self.id)

    @property
    def is_composite(self) -> bool:
        return self.kind is NodeKind.Composite

    def require_mode(self) -> ExecMode:
        """Return the execution mode of a composite, or raise InvalidModeError."""
        if not isinstance(self.exec_mode, ExecMode):
            raise InvalidModeError(f"Composite node {self.label} has invalid execution mode {self.exec_mode!r}")
        return self.exec_mode

    def append_child(self, kind: NodeKind | str, exec_mode: ExecMode | str | None = None) -> Node:
        """Create a new node under this one through the owning tree."""
        if self.tree is None:
            raise InvalidTreeError(f"Node {self.label} does not belong to a tree")
        return self.tree.create_node(kind, exec_mode, parent=self)

    def _attach(self, child: Node) -> None:
        if self.kind is not NodeKind.Composite:
            raise InvalidTreeError(f"Cannot append a child under {self.kind.value} node {self.label}")
        child.parent = self
        child.level = self.level + 1
        child.tree = self.tree
        self.children.append(child)

    # Geometry accessors for rendering collaborators.

    def require_geometry(self) -> Geometry:
        """Return the node's box, or raise InvalidTreeError before layout."""
        if self.geometry is None:
            raise InvalidTreeError(f"Node {self.label} has no geometry; run analyze() first")
        return self.geometry

    @property
    def left(self) -> int:
        return self.require_geometry().left

    @property
    def top(self) -> int:
        return self.require_geometry().top

    @property
    def width(self) -> int:
        return self.require_geometry().width

    @property
    def height(self) -> int:
        return self.require_geometry().height

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view of the node for rendering collaborators."""
        data: dict[str, Any] = {
            "id": self.id,
            "ref": self.ref,
            "kind": self.kind.value,
            "exec_mode": self.exec_mode.value if self.is_composite and self.exec_mode else None,
            "level": self.level,
        }
        if self.geometry is not None:
            data.update(
                left=self.geometry.left,
                top=self.geometry.top,
                width=self.geometry.width,
                height=self.geometry.height,
            )
        return data


Visitor = Callable[[Node, int], None]


# ─── Tree ─────────────────────────────────────────────────────────────────────


class Tree:
    """Owner of a blueprint: root, id counter, flattened nodes and links.

    Attributes:
        root: The single entry point, set exactly once.
        nodes: Pre-order snapshot rebuilt by :meth:`flatten`.
        links: Resolved dependency links (see ``blueprint_layout.links``).
    """

    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        """Discard the whole tree and reset the id counter."""
        self._id_counter = 1
        self.root: Node | None = None
        self.nodes: list[Node] = []
        self.links: list[Link] = []

    def assign_id(self) -> int:
        """Return the next id. Ids start at 1 and are never reused."""
        node_id = self._id_counter
        self._id_counter += 1
        return node_id

    # ── Construction ──

    def create_node(
        self,
        kind: NodeKind | str,
        exec_mode: ExecMode | str | None = None,
        parent: Node | None = None,
    ) -> Node:
        """Create a leaf or composite node, appending it to ``parent`` if given."""
        kind = NodeKind.parse(kind)
        if kind is NodeKind.Barrier:
            raise InvalidTreeError("Barrier nodes are only created by barrier insertion")
        mode = ExecMode.parse(exec_mode) if exec_mode is not None else None
        if parent is not None:
            if parent.tree is not self:
                raise InvalidTreeError(f"Parent node {parent.label} belongs to another tree")
            if parent.kind is not NodeKind.Composite:
                raise InvalidTreeError(f"Cannot append a child under {parent.kind.value} node {parent.label}")

        node = Node(kind=kind, exec_mode=mode, id=self.assign_id(), tree=self)
        if parent is not None:
            parent._attach(node)
        return node

    def set_root(self, node: Node) -> Node:
        if self.root is not None:
            raise InvalidTreeError("Tree root is already set")
        if node.parent is not None:
            raise InvalidTreeError(f"Node {node.label} already has a parent and cannot be the root")
        node.level = 0
        node.tree = self
        self.root = node
        return node

    def create_root(self, kind: NodeKind | str, exec_mode: ExecMode | str | None = None) -> Node:
        return self.set_root(self.create_node(kind, exec_mode))

    def create_child(self, parent: Node, kind: NodeKind | str, exec_mode: ExecMode | str | None = None) -> Node:
        return self.create_node(kind, exec_mode, parent=parent)

    # ── Traversal ──

    def _require_root(self) -> Node:
        if self.root is None:
            raise InvalidTreeError("Tree root is not set")
        return self.root

    def scan_tree(self, visitor: Visitor) -> None:
        """Pre-order walk calling ``visitor(node, index_within_siblings)``.

        Raises InvalidTreeError when a node is reached twice, which means a
        child list is shared or cyclic.
        """
        root = self._require_root()
        seen: set[int] = set()
        stack: list[tuple[Node, int]] = [(root, 0)]
        while stack:
            node, idx = stack.pop()
            if id(node) in seen:
                raise InvalidTreeError(f"Node {node.label} is reachable more than once")
            seen.add(id(node))
            visitor(node, idx)
            for child_idx in range(len(node.children) - 1, -1, -1):
                stack.append((node.children[child_idx], child_idx))

    def flatten(self) -> list[Node]:
        """Rebuild :attr:`nodes` as a pre-order snapshot and return it.

        Each node's ``ref`` is set to its index in the snapshot. Unlike ``id``
        it is defined for barriers too, so plain-data views can name them.
        """
        nodes: list[Node] = []
        self.scan_tree(lambda node, _idx: nodes.append(node))
        for ref, node in enumerate(nodes):
            node.ref = ref
        self.nodes = nodes
        return nodes

    @property
    def depth(self) -> int:
        """Largest level among the flattened nodes (0 for a lone root)."""
        return max((n.level for n in self.nodes), default=0)

    @property
    def barriers(self) -> list[Node]:
        return [n for n in self.nodes if n.kind is NodeKind.Barrier]

    def find(self, node_id: int) -> Node:
        """Look up a flattened node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(f"Node not found: {node_id}")

    def structure_graph(self) -> nx.DiGraph:
        """Parent → child digraph over the flattened nodes."""
        g: nx.DiGraph = nx.DiGraph()
        for node in self.nodes:
            g.add_node(node, id=node.id, kind=node.kind)
        for node in self.nodes:
            for child in node.children:
                g.add_edge(node, child)
        return g


def check_structure(tree: Tree) -> None:
    """Verify the flattened nodes form a strict tree rooted at ``tree.root``.

    Raises:
        InvalidTreeError: if the root is unset, the structure is not an
            arborescence, or a child's parent/level back-references disagree
            with the child lists.
    """
    root = tree._require_root()
    if not tree.nodes or tree.nodes[0] is not root:
        raise InvalidTreeError("Flattened nodes are stale; call flatten() first")

    g = tree.structure_graph()
    if not nx.is_arborescence(g):
        raise InvalidTreeError("Blueprint structure is not a tree")

    for node in tree.nodes:
        if node is not root and node.parent is None:
            raise InvalidTreeError(f"Node {node.label} has no parent")
        for child in node.children:
            if child.parent is not node:
                raise InvalidTreeError(f"Node {child.label} has an inconsistent parent reference")
            if child.level != node.level + 1:
                raise InvalidTreeError(f"Node {child.label} has level {child.level}, expected {node.level + 1}")
