"""SVG renderer — renders an analyzed blueprint as nested boxes and arrows."""

from __future__ import annotations

from blueprint_layout.tree import Node, Tree
from blueprint_layout.types import Link, NodeKind

# ─── Constants ──────────────────────────────────────────────────────────────

CELL_SIZE = 100  # pixels per grid unit
LEVEL_INSET = 10  # pixels each nesting level shrinks a box on every side
LINK_GAP = 10  # horizontal offset of arrow ends from cell centres
FONT_SIZE = 10
FONT_FAMILY = "Arial"
PADDING = 20  # canvas padding in pixels

_STROKE: dict[NodeKind, str] = {
    NodeKind.Leaf: "darkgreen",
    NodeKind.Composite: "blue",
    NodeKind.Barrier: "red",
}

_FILL: dict[NodeKind, str] = {
    NodeKind.Leaf: "#eeffee",
    NodeKind.Composite: "white",
    NodeKind.Barrier: "#ffeeee",
}


def _font(size: int = FONT_SIZE) -> str:
    return f'font-family="{FONT_FAMILY}" font-size="{size}"'


# ─── Coordinate Helpers ─────────────────────────────────────────────────────


def _px(units: int) -> int:
    return PADDING + units * CELL_SIZE


def _node_rect(node: Node) -> tuple[int, int, int, int]:
    """Return (x, y, width, height) in pixels, inset by nesting level."""
    inset = node.level * LEVEL_INSET
    return (
        _px(node.left) + inset,
        _px(node.top) + inset,
        max(node.width * CELL_SIZE - 2 * inset, 1),
        max(node.height * CELL_SIZE - 2 * inset, 1),
    )


# ─── Node Rendering ─────────────────────────────────────────────────────────


def _render_node(node: Node) -> str:
    x, y, w, h = _node_rect(node)
    stroke = _STROKE[node.kind]
    parts = [f'<rect x="{x}" y="{y}" width="{w}" height="{h}" fill="{_FILL[node.kind]}" stroke="{stroke}" stroke-width="1"/>']
    # Barriers carry no id and get no label.
    if node.id is not None:
        parts.append(
            f'<text x="{x + 1}" y="{y + 1}" dominant-baseline="hanging" {_font()} fill="{stroke}">{node.id}</text>'
        )
    return "\n".join(parts)


# ─── Link Rendering ─────────────────────────────────────────────────────────


def _render_link(link: Link) -> str:
    half = CELL_SIZE // 2
    x1 = _px(link.src.left) + half + LINK_GAP
    y1 = _px(link.src.top) + half
    x2 = _px(link.dst.left) + half - LINK_GAP
    y2 = _px(link.dst.top) + half
    return (
        f'<line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" stroke="black" stroke-width="1" '
        f'stroke-linecap="round" marker-end="url(#arrowhead)"/>'
    )


# ─── Public Renderer ────────────────────────────────────────────────────────


class SvgRenderer:
    """SVG renderer — consumes an analyzed tree, produces an SVG string."""

    def render(self, tree: Tree) -> str:
        if not tree.nodes:
            return ""

        root = tree.nodes[0]
        svg_w = PADDING * 2 + root.width * CELL_SIZE
        svg_h = PADDING * 2 + root.height * CELL_SIZE

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{svg_w}" height="{svg_h}" viewBox="0 0 {svg_w} {svg_h}">',
            "<defs>",
            '  <marker id="arrowhead" markerWidth="10" markerHeight="7" refX="10" refY="3.5" orient="auto">',
            '    <polygon points="0 0, 10 3.5, 0 7" fill="black"/>',
            "  </marker>",
            "</defs>",
            f'<rect width="{svg_w}" height="{svg_h}" fill="white"/>',
        ]

        # Pre-order draws parents first so nested boxes stay visible.
        for node in tree.nodes:
            parts.append(_render_node(node))

        # Links on top of boxes
        for link in tree.links:
            parts.append(_render_link(link))

        parts.append("</svg>")
        return "\n".join(parts)
