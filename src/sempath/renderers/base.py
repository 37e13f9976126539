"""Base renderer protocol."""

from __future__ import annotations

from typing import Protocol

from sempath.graph import GraphData


class Renderer(Protocol):
    """Protocol that all renderers must implement."""

    def render(self, graph: GraphData) -> str:
        """Render prepared graph data to an output string."""
        ...
