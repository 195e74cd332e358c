"""Link resolution — leaf-to-leaf dependency edges implied by the tree shape.

Seeding links every adjacent pair of children of a sequential composite.
Expansion then rewrites links whose endpoints are composites until only
childless nodes (leaves and barriers) remain:

  * destination sequential → its first child; parallel → every child
  * source sequential      → its last child;  parallel → every child

Each sub-pass builds a new list from a snapshot of the previous one.
A replacement takes the place of the link it replaces, so the final order is
deterministic for a given tree.
"""

from __future__ import annotations

import logging

import networkx as nx

from blueprint_layout.errors import InvalidTreeError
from blueprint_layout.tree import Node, Tree
from blueprint_layout.types import ExecMode, Link, NodeKind

logger = logging.getLogger(__name__)


# ─── Seeding ──────────────────────────────────────────────────────────────────


def seed_links(nodes: list[Node]) -> list[Link]:
    """One link per adjacent child pair of every sequential composite."""
    links: list[Link] = []
    for node in nodes:
        if node.kind is not NodeKind.Composite or node.require_mode() is not ExecMode.Sequential:
            continue
        for first, second in zip(node.children, node.children[1:]):
            links.append(Link(src=first, dst=second))
    return links


# ─── Expansion ────────────────────────────────────────────────────────────────


def _composite_children(node: Node) -> list[Node]:
    if not node.children:
        raise InvalidTreeError(f"Composite node {node.label} has no children to link through")
    return node.children


def entry_points(node: Node) -> list[Node]:
    """Children where work inside ``node`` starts."""
    mode = node.require_mode()
    children = _composite_children(node)
    return [children[0]] if mode is ExecMode.Sequential else list(children)


def exit_points(node: Node) -> list[Node]:
    """Children where work inside ``node`` finishes."""
    mode = node.require_mode()
    children = _composite_children(node)
    return [children[-1]] if mode is ExecMode.Sequential else list(children)


def _expand_destinations(links: list[Link]) -> tuple[list[Link], int]:
    result: list[Link] = []
    rewrites = 0
    for link in links:
        if link.dst.kind is NodeKind.Composite:
            rewrites += 1
            result.extend(Link(src=link.src, dst=entry) for entry in entry_points(link.dst))
        else:
            result.append(link)
    return result, rewrites


def _expand_sources(links: list[Link]) -> tuple[list[Link], int]:
    result: list[Link] = []
    rewrites = 0
    for link in links:
        if link.src.kind is NodeKind.Composite:
            rewrites += 1
            result.extend(Link(src=exit_node, dst=link.dst) for exit_node in exit_points(link.src))
        else:
            result.append(link)
    return result, rewrites


def _dedupe(links: list[Link]) -> list[Link]:
    return list(dict.fromkeys(links))


def expand_links(links: list[Link], max_passes: int | None = None) -> tuple[list[Link], int]:
    """Expand composite endpoints until every link joins childless nodes.

    Args:
        links: Links to expand. The list is not modified.
        max_passes: Upper bound on outer passes. Every rewrite moves an
            endpoint one level deeper, so ``depth + 2`` always suffices on a
            well-formed tree. ``None`` disables the bound.

    Returns:
        ``(resolved_links, passes)`` where ``passes`` counts outer passes,
        including the final one that found nothing to rewrite.

    Raises:
        InvalidTreeError: a composite endpoint has no children, or the pass
            bound is exceeded.
        InvalidModeError: a composite endpoint has no valid execution mode.
    """
    current = _dedupe(links)
    passes = 0
    while True:
        passes += 1
        if max_passes is not None and passes > max_passes:
            raise InvalidTreeError(f"Link expansion did not converge within {max_passes} passes")

        current, dst_rewrites = _expand_destinations(current)
        current, src_rewrites = _expand_sources(current)
        current = _dedupe(current)
        if dst_rewrites == 0 and src_rewrites == 0:
            break

    logger.debug("Link expansion converged after %d passes (%d links)", passes, len(current))
    return current, passes


def resolve_links(tree: Tree) -> list[Link]:
    """Seed and expand links over ``tree.nodes``; store and return them."""
    seeds = seed_links(tree.nodes)
    tree.links, _ = expand_links(seeds, max_passes=tree.depth + 2)
    return tree.links


# ─── Export ───────────────────────────────────────────────────────────────────


def dependency_graph(tree: Tree) -> nx.DiGraph:
    """Resolved links as a DiGraph keyed by node object.

    Every leaf and barrier in the tree is present, linked or not. Node
    attributes: ``id`` (``None`` for barriers) and ``kind``.
    """
    g: nx.DiGraph = nx.DiGraph()
    for node in tree.nodes:
        if node.kind is not NodeKind.Composite:
            g.add_node(node, id=node.id, kind=node.kind)
    for link in tree.links:
        g.add_edge(link.src, link.dst)
    return g
