"""Renderers turning prepared GraphData into drawable output."""

from sempath.renderers.base import Renderer
from sempath.renderers.svg import SvgRenderer

__all__ = ["Renderer", "SvgRenderer"]
