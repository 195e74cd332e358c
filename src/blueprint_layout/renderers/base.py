"""Base renderer protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from blueprint_layout.tree import Tree


class Renderer(Protocol):
    """Protocol that all renderers must implement."""

    def render(self, tree: Tree) -> str:
        """Render an analyzed blueprint tree to an output string."""
        ...
