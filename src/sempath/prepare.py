"""Join node/edge tables with a layout into drawable GraphData.

The layout is the single source of truth for which nodes are drawn:

* extracted nodes missing from the layout are dropped;
* caller-supplied nodes missing from the layout are an error;
* layout names with no node become placeholder nodes;
* edges with an endpoint that is not drawn are dropped with a warning.
"""

from __future__ import annotations

import logging
import warnings
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Any

import pandas as pd

from sempath.config import DEFAULT_STYLE, GraphStyle
from sempath.errors import DroppedEdgeWarning, LayoutMismatchError
from sempath.graph import Edge, EdgeTable, GraphData, Node, NodeTable
from sempath.layout.auto import auto_layout
from sempath.layout.matrix import LayoutMatrix, grid_rows
from sempath.routing import route_edges

logger = logging.getLogger(__name__)


def _is_node_input(obj: Any) -> bool:
    if isinstance(obj, NodeTable):
        return True
    if isinstance(obj, pd.DataFrame):
        return "name" in obj.columns
    if isinstance(obj, (list, tuple)):
        return all(isinstance(n, Node) for n in obj)
    return False


def _as_nodes(obj: Any) -> NodeTable:
    if isinstance(obj, NodeTable):
        return obj.copy()
    if isinstance(obj, pd.DataFrame):
        return NodeTable.from_frame(obj)
    return NodeTable(obj).copy()


def _as_edges(obj: Any) -> EdgeTable:
    if obj is None:
        return EdgeTable()
    if isinstance(obj, EdgeTable):
        return obj.copy()
    if isinstance(obj, pd.DataFrame):
        return EdgeTable.from_frame(obj)
    return EdgeTable(obj).copy()


def _as_layout(layout: Any, names: Iterable[str]) -> LayoutMatrix:
    if isinstance(layout, LayoutMatrix):
        return layout
    grid = grid_rows(layout)
    counts = Counter(c for row in grid for c in row if c is not None)
    repeated = sorted(n for n in names if counts[n] > 1)
    if repeated:
        raise LayoutMismatchError("Node(s) appear more than once in the layout", {"nodes": repeated})
    return LayoutMatrix(grid)


def place_nodes(nodes: NodeTable, layout: LayoutMatrix, style: GraphStyle) -> NodeTable:
    """Set row/col and x/y on the given nodes and add layout-only placeholders.

    Nodes not in the layout are left out of the result.
    """
    placed = NodeTable()
    for node in nodes:
        if node.name in layout:
            placed.append(node)
    for name in layout.names():
        if name not in placed:
            placed.append(Node(name=name, placeholder=True))

    for node in placed:
        row, col = layout.position(node.name)
        node.row, node.col = row, col
        node.x = col * style.spacing_x
        node.y = row * style.spacing_y
    return placed


def drop_dangling_edges(edges: EdgeTable, names: Iterable[str]) -> EdgeTable:
    """Keep edges whose endpoints both exist; warn about the rest."""
    known = set(names)
    kept = EdgeTable()
    for edge in edges:
        missing = [n for n in (edge.from_, edge.to) if n not in known]
        if missing:
            message = f"Dropping edge {edge.from_} -> {edge.to}: node(s) {', '.join(missing)} not in layout"
            logger.warning(message)
            warnings.warn(message, DroppedEdgeWarning, stacklevel=3)
            continue
        kept.append(edge)
    return kept


def prepare(
    nodes_or_fit: Any = None,
    edges: EdgeTable | Iterable[Edge] | pd.DataFrame | None = None,
    layout: LayoutMatrix | Sequence[Sequence[str | None]] | None = None,
    *,
    style: GraphStyle | None = None,
    angle: float | None = None,
    **extract_options: Any,
) -> GraphData:
    """Build routed GraphData from tables or a fitted model and a layout.

    Args:
        nodes_or_fit: A NodeTable, list of Nodes, node DataFrame (with a
            ``name`` column), a fitted model, or None (layout-only nodes).
        edges: Edge table; extracted from the model when omitted.
        layout: LayoutMatrix or nested grid; an automatic ``tree`` layout is
            used when omitted.
        style: Drawing defaults; cell pitch comes from ``spacing_x/spacing_y``.
        angle: Routing threshold passed to ``route_edges``.
        **extract_options: Forwarded to ``extract_edges``.

    Raises:
        LayoutMismatchError: A caller-supplied node is missing from the layout
            or a node name appears more than once in it.
    """
    style = style or DEFAULT_STYLE

    if nodes_or_fit is None:
        node_table, from_model = NodeTable(), False
    elif _is_node_input(nodes_or_fit):
        node_table, from_model = _as_nodes(nodes_or_fit), False
    else:
        from sempath.extract import extract_edges, extract_nodes

        node_table, from_model = extract_nodes(nodes_or_fit), True
        if edges is None:
            edges = extract_edges(nodes_or_fit, **extract_options)

    edge_table = _as_edges(edges)

    if layout is None:
        layout = auto_layout(GraphData(node_table, edge_table, style))
    layout = _as_layout(layout, node_table.names())

    missing = [n for n in node_table.names() if n not in layout]
    if missing and not from_model:
        raise LayoutMismatchError("Node(s) missing from the layout", {"nodes": missing})
    if missing:
        logger.debug("Not drawing extracted node(s) absent from the layout: %s", ", ".join(missing))

    placed = place_nodes(node_table, layout, style)
    kept = drop_dangling_edges(edge_table, placed.names())
    route_edges(placed, kept, angle=angle)

    return GraphData(nodes=placed, edges=kept, style=style, layout=layout)
