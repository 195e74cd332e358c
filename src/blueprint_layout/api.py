"""Public API: run the analysis pipeline and render blueprint trees."""

from __future__ import annotations

import logging

from blueprint_layout.layout import insert_barriers, layout_tree
from blueprint_layout.links import resolve_links
from blueprint_layout.renderers.base import Renderer
from blueprint_layout.renderers.outline import OutlineRenderer
from blueprint_layout.renderers.svg import SvgRenderer
from blueprint_layout.tree import Tree, check_structure

logger = logging.getLogger(__name__)


def analyze(tree: Tree) -> None:
    """Lay out ``tree`` and resolve its links in place.

    Pipeline: flatten → insert barriers → reflatten → check structure →
    size → position → resolve links. On error the tree's geometry and links
    must not be used.
    """
    tree.flatten()
    barriers = insert_barriers(tree)
    tree.flatten()
    check_structure(tree)
    root_box = layout_tree(tree)
    resolve_links(tree)
    logger.debug(
        "Analyzed blueprint: %d nodes, %d barriers, %d links, grid %dx%d",
        len(tree.nodes),
        len(barriers),
        len(tree.links),
        root_box.width,
        root_box.height,
    )


def _render(tree: Tree, renderer: Renderer) -> str:
    # analyze is idempotent; re-running it picks up nodes appended since the last call.
    analyze(tree)
    return renderer.render(tree)


def render_svg(tree: Tree) -> str:
    """Render the blueprint as nested SVG boxes with dependency arrows."""
    return _render(tree, SvgRenderer())


def render_outline(tree: Tree) -> str:
    """Render the blueprint as an indented text outline."""
    return _render(tree, OutlineRenderer())
