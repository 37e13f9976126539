"""Row-wise editing of node and edge tables.

Styling is applied one record at a time, either through a callback that
receives each row, or through ``Table.update(predicate, **changes)``.
"""

from __future__ import annotations

from collections.abc import Callable

from sempath.graph import Edge, EdgeTable, GraphData, Node, NodeTable


def edit_nodes(nodes: NodeTable, func: Callable[[Node], None]) -> NodeTable:
    """Call ``func`` on every node, in place; returns the table for chaining."""
    for node in nodes:
        func(node)
    return nodes


def edit_edges(edges: EdgeTable, func: Callable[[Edge], None]) -> EdgeTable:
    """Call ``func`` on every edge, in place; returns the table for chaining."""
    for edge in edges:
        func(edge)
    return edges


def _is_sig(edge: Edge, alpha: float) -> bool | None:
    if edge.pval is None:
        return None
    return edge.pval < alpha


def hide_var(graph: GraphData, name: str) -> GraphData:
    """Hide a node and every edge touching it.

    Only edges that were shown are hidden, and those are remembered so that
    ``show_var`` restores exactly them.
    """
    graph.nodes.update(lambda n: n.name == name, show=False)
    hidden = graph.hidden_edges.setdefault(name, [])
    for edge in graph.edges.touching(name):
        if edge.show:
            edge.show = False
            hidden.append(edge)
    return graph


def show_var(graph: GraphData, name: str) -> GraphData:
    """Reveal a node and the edges ``hide_var`` hid with it.

    Edges hidden by other means (``hide_nonsig_edges``, a callback) stay
    hidden. An edge whose other endpoint is still hidden is handed over to
    that node and comes back when it is shown.
    """
    graph.nodes.update(lambda n: n.name == name, show=True)
    visible = {n.name for n in graph.nodes if n.show}
    for edge in graph.hidden_edges.pop(name, []):
        other = edge.to if edge.from_ == name else edge.from_
        if other in visible:
            edge.show = True
        else:
            graph.hidden_edges.setdefault(other, []).append(edge)
    return graph


def hide_nonsig_edges(edges: EdgeTable, alpha: float = 0.05) -> EdgeTable:
    """Hide edges whose p-value is at or above ``alpha``; fixed edges stay."""
    edges.update(lambda e: _is_sig(e, alpha) is False, show=False)
    return edges


def colour_sig_edges(edges: EdgeTable, colour: str, alpha: float = 0.05) -> EdgeTable:
    """Colour edges with p-value below ``alpha``."""
    edges.update(lambda e: _is_sig(e, alpha) is True, colour=colour)
    return edges


def colour_edges_by_sign(edges: EdgeTable, positive: str = "darkgreen", negative: str = "darkred") -> EdgeTable:
    """Colour edges by the sign of their estimate; zero or missing estimates are left alone."""

    def paint(edge: Edge) -> None:
        if edge.est is None or edge.est == 0:
            return
        edge.colour = positive if edge.est > 0 else negative

    return edit_edges(edges, paint)
