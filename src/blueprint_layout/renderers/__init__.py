"""Renderers consuming analyzed blueprint trees."""

from blueprint_layout.renderers.base import Renderer
from blueprint_layout.renderers.outline import OutlineRenderer
from blueprint_layout.renderers.svg import SvgRenderer

__all__ = ["OutlineRenderer", "Renderer", "SvgRenderer"]
