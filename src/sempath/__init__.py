"""sempath: tidy path diagrams for structural equation models."""

from sempath.api import graph_sem, render_svg
from sempath.config import DEFAULT_STYLE, GraphStyle
from sempath.edit import (
    colour_edges_by_sign,
    colour_sig_edges,
    edit_edges,
    edit_nodes,
    hide_nonsig_edges,
    hide_var,
    show_var,
)
from sempath.errors import (
    DegenerateEdgeError,
    DroppedEdgeWarning,
    InvalidLayoutError,
    LayoutMismatchError,
    ModelNotSupportedError,
    SempathError,
    StyleError,
)
from sempath.extract import extract_edges, extract_nodes, parameter_table
from sempath.graph import Edge, EdgeTable, GraphData, Node, NodeTable
from sempath.layout import LayoutMatrix, auto_layout, build_layout, read_layout_csv
from sempath.prepare import prepare
from sempath.renderers import Renderer, SvgRenderer
from sempath.routing import connect_sides, route_edges
from sempath.types import EdgeKind, LayoutAlgorithm, NodeShape, Side

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_STYLE",
    "DegenerateEdgeError",
    "DroppedEdgeWarning",
    "Edge",
    "EdgeKind",
    "EdgeTable",
    "GraphData",
    "GraphStyle",
    "InvalidLayoutError",
    "LayoutAlgorithm",
    "LayoutMatrix",
    "LayoutMismatchError",
    "ModelNotSupportedError",
    "Node",
    "NodeShape",
    "NodeTable",
    "Renderer",
    "SempathError",
    "Side",
    "StyleError",
    "SvgRenderer",
    "auto_layout",
    "build_layout",
    "colour_edges_by_sign",
    "colour_sig_edges",
    "connect_sides",
    "edit_edges",
    "edit_nodes",
    "extract_edges",
    "extract_nodes",
    "graph_sem",
    "hide_nonsig_edges",
    "hide_var",
    "parameter_table",
    "prepare",
    "read_layout_csv",
    "render_svg",
    "route_edges",
    "show_var",
]
