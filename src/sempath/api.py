"""Public API: one call from a fitted model (or tables) to an SVG diagram."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sempath.config import GraphStyle
from sempath.graph import Edge, EdgeTable, GraphData, Node, NodeTable
from sempath.layout.matrix import LayoutMatrix
from sempath.prepare import prepare
from sempath.renderers.svg import SvgRenderer


def render_svg(graph: GraphData, style: GraphStyle | None = None) -> str:
    """Render prepared graph data to an SVG string."""
    return SvgRenderer(style).render(graph)


def graph_sem(
    model: Any = None,
    *,
    nodes: NodeTable | Iterable[Node] | None = None,
    edges: EdgeTable | Iterable[Edge] | None = None,
    layout: LayoutMatrix | Sequence[Sequence[str | None]] | None = None,
    angle: float | None = None,
    style: GraphStyle | None = None,
    **extract_options: Any,
) -> str:
    """Draw a path diagram for a fitted model, or for explicit node/edge tables.

    Args:
        model: Fitted model (semopy Model or lavaan-style parameter table).
            Ignored for node extraction when ``nodes`` is given.
        nodes: Node table to draw instead of the extracted nodes.
        edges: Edge table to draw instead of the extracted edges.
        layout: LayoutMatrix or nested grid; automatic tree layout if omitted.
        angle: Edge routing threshold in degrees (see ``route_edges``).
        style: Drawing defaults.
        **extract_options: Forwarded to ``extract_edges``.

    Returns:
        The SVG document as a string.
    """
    if nodes is None and model is None:
        raise ValueError("graph_sem() needs a fitted model or a node table")
    if nodes is not None:
        if edges is None and model is not None:
            from sempath.extract import extract_edges

            edges = extract_edges(model, **extract_options)
        nodes = nodes if isinstance(nodes, NodeTable) else list(nodes)
        graph = prepare(nodes, edges, layout, style=style, angle=angle)
    else:
        graph = prepare(model, edges, layout, style=style, angle=angle, **extract_options)
    return render_svg(graph)
