"""SVG renderer: draws prepared GraphData as an SVG path diagram."""

from __future__ import annotations

import math

from sempath.config import LINETYPES, GraphStyle
from sempath.errors import StyleError
from sempath.graph import Edge, GraphData, Node
from sempath.types import EdgeKind, NodeShape, Side

# ─── Constants ──────────────────────────────────────────────────────────────

_DASHES: dict[str, str] = {
    "solid": "",
    "dashed": "6 4",
    "dotted": "2 3",
    "dotdash": "2 3 6 3",
    "longdash": "12 4",
    "twodash": "6 2 2 2",
    "blank": "",
}

_LOOP_HEIGHT = 0.6  # self-loop rise above the node, in layout units
_LABEL_OFFSET = 6  # pixels between an edge and its label


def _escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def _font(style: GraphStyle, size: int | None = None) -> str:
    return f'font-family="{_escape(style.font_family)}" font-size="{size or style.font_size}"'


def _num(v: float) -> str:
    return f"{v:.1f}".rstrip("0").rstrip(".")


# ─── Attribute Validation ───────────────────────────────────────────────────


def _check_common(kind: str, name: str, linetype: str | None, alpha: float | None, size: float | None) -> None:
    if linetype is not None and linetype not in LINETYPES:
        raise StyleError(
            f"Unknown linetype {linetype!r}; expected one of: {', '.join(sorted(LINETYPES))}", {kind: name}
        )
    if alpha is not None and not 0.0 <= alpha <= 1.0:
        raise StyleError("alpha must be between 0 and 1", {kind: name, "alpha": alpha})
    if size is not None and size <= 0:
        raise StyleError("size must be positive", {kind: name, "size": size})


def _check_colours(kind: str, name: str, **colours: str | None) -> None:
    for field_name, value in colours.items():
        if value is not None and (not isinstance(value, str) or not value.strip()):
            raise StyleError(f"{field_name} must be a non-empty colour string", {kind: name, field_name: value})


def validate_node(node: Node) -> None:
    """Raise StyleError if a visual field of ``node`` cannot be drawn."""
    _check_common("node", node.name, node.linetype, node.alpha, node.size)
    _check_colours("node", node.name, colour=node.colour, fill=node.fill, label_colour=node.label_colour)
    for dim in ("width", "height"):
        value = getattr(node, dim)
        if value is not None and value <= 0:
            raise StyleError(f"{dim} must be positive", {"node": node.name, dim: value})


def validate_edge(edge: Edge) -> None:
    """Raise StyleError if a visual field of ``edge`` cannot be drawn."""
    name = f"{edge.from_}->{edge.to}"
    _check_common("edge", name, edge.linetype, edge.alpha, edge.size)
    _check_colours("edge", name, colour=edge.colour, label_colour=edge.label_colour)


# ─── Geometry Helpers ───────────────────────────────────────────────────────


def node_size(node: Node, style: GraphStyle) -> tuple[float, float]:
    """(width, height) in layout units."""
    if node.shape == NodeShape.OVAL:
        default = (style.ellipse_width, style.ellipse_height)
    else:
        default = (style.rect_width, style.rect_height)
    return (node.width or default[0], node.height or default[1])


def anchor(node: Node, side: Side, style: GraphStyle) -> tuple[float, float]:
    """Midpoint of ``side`` of the node, in layout units."""
    w, h = node_size(node, style)
    x, y = node.x or 0.0, node.y or 0.0
    if side == Side.TOP:
        return (x, y - h / 2)
    if side == Side.BOTTOM:
        return (x, y + h / 2)
    if side == Side.LEFT:
        return (x - w / 2, y)
    return (x + w / 2, y)


class _Canvas:
    """Maps layout units to pixel coordinates."""

    def __init__(self, nodes: list[Node], style: GraphStyle) -> None:
        self.style = style
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        for n in nodes:
            w, h = node_size(n, style)
            x, y = n.x or 0.0, n.y or 0.0
            min_x, max_x = min(min_x, x - w / 2), max(max_x, x + w / 2)
            min_y, max_y = min(min_y, y - h / 2 - _LOOP_HEIGHT), max(max_y, y + h / 2)
        self.min_x, self.min_y = min_x, min_y
        ppu = style.px_per_unit
        self.width = round((max_x - min_x) * ppu + 2 * style.padding)
        self.height = round((max_y - min_y) * ppu + 2 * style.padding)

    def px(self, x: float) -> float:
        return self.style.padding + (x - self.min_x) * self.style.px_per_unit

    def py(self, y: float) -> float:
        return self.style.padding + (y - self.min_y) * self.style.px_per_unit

    def point(self, xy: tuple[float, float]) -> tuple[float, float]:
        return (self.px(xy[0]), self.py(xy[1]))


# ─── Shape Rendering ────────────────────────────────────────────────────────


def _render_node(node: Node, canvas: _Canvas) -> str:
    style = canvas.style
    w, h = node_size(node, style)
    ppu = style.px_per_unit
    cx, cy = canvas.px(node.x or 0.0), canvas.py(node.y or 0.0)
    pw, ph = w * ppu, h * ppu

    stroke = _escape(node.colour or style.colour)
    fill = _escape(node.fill or style.fill)
    width = (node.size or style.size) * 1.5
    opacity = node.alpha if node.alpha is not None else style.alpha
    linetype = node.linetype or "solid"
    attrs = f'fill="{fill}" stroke="{stroke if linetype != "blank" else "none"}" stroke-width="{_num(width)}"'
    if _DASHES[linetype]:
        attrs += f' stroke-dasharray="{_DASHES[linetype]}"'
    if opacity < 1.0:
        attrs += f' opacity="{_num(opacity)}"'

    if node.shape == NodeShape.OVAL:
        shape_svg = f'<ellipse cx="{_num(cx)}" cy="{_num(cy)}" rx="{_num(pw / 2)}" ry="{_num(ph / 2)}" {attrs}/>'
    else:
        shape_svg = (
            f'<rect x="{_num(cx - pw / 2)}" y="{_num(cy - ph / 2)}" width="{_num(pw)}" height="{_num(ph)}" {attrs}/>'
        )

    colour = _escape(node.label_colour or style.label_colour)
    label = _escape(node.label or "")
    label_svg = (
        f'<text x="{_num(cx)}" y="{_num(cy)}" dominant-baseline="central" text-anchor="middle" '
        f'{_font(style)} fill="{colour}">{label}</text>'
    )
    return f"{shape_svg}\n{label_svg}"


# ─── Edge Rendering ─────────────────────────────────────────────────────────


def _control_point(p0: tuple[float, float], p2: tuple[float, float], curvature: float) -> tuple[float, float]:
    """Quadratic Bézier control point bending the chord by ``curvature`` degrees.

    Positive curvature bends to the left of the direction of travel.
    """
    mx, my = (p0[0] + p2[0]) / 2, (p0[1] + p2[1]) / 2
    dx, dy = p2[0] - p0[0], p2[1] - p0[1]
    length = math.hypot(dx, dy)
    if length == 0 or curvature == 0:
        return (mx, my)
    offset = length / 2 * math.tan(math.radians(curvature) / 2)
    return (mx + dy / length * offset, my - dx / length * offset)


def _edge_path(edge: Edge, src: Node, dst: Node, canvas: _Canvas) -> tuple[str, tuple[float, float]]:
    """SVG path data and label position (pixels) for one edge."""
    style = canvas.style
    if edge.is_self_loop:
        w, h = node_size(src, style)
        x, y = src.x or 0.0, (src.y or 0.0) - h / 2
        start = canvas.point((x - w / 4, y))
        end = canvas.point((x + w / 4, y))
        c1 = canvas.point((x - w / 2, y - _LOOP_HEIGHT))
        c2 = canvas.point((x + w / 2, y - _LOOP_HEIGHT))
        d = (
            f"M {_num(start[0])} {_num(start[1])} "
            f"C {_num(c1[0])} {_num(c1[1])}, {_num(c2[0])} {_num(c2[1])}, {_num(end[0])} {_num(end[1])}"
        )
        return d, canvas.point((x, y - _LOOP_HEIGHT * 0.75))

    p0 = canvas.point(anchor(src, edge.connect_from or Side.BOTTOM, style))
    p2 = canvas.point(anchor(dst, edge.connect_to or Side.TOP, style))
    curvature = edge.curvature or 0.0
    if curvature == 0:
        d = f"M {_num(p0[0])} {_num(p0[1])} L {_num(p2[0])} {_num(p2[1])}"
        return d, ((p0[0] + p2[0]) / 2, (p0[1] + p2[1]) / 2)

    c = _control_point(p0, p2, curvature)
    d = f"M {_num(p0[0])} {_num(p0[1])} Q {_num(c[0])} {_num(c[1])} {_num(p2[0])} {_num(p2[1])}"
    # Point on the curve at t = 0.5.
    mid = (0.25 * p0[0] + 0.5 * c[0] + 0.25 * p2[0], 0.25 * p0[1] + 0.5 * c[1] + 0.25 * p2[1])
    return d, mid


def _render_edge(edge: Edge, src: Node, dst: Node, canvas: _Canvas) -> str:
    style = canvas.style
    linetype = edge.linetype or style.linetype
    stroke = "none" if linetype == "blank" else _escape(edge.colour or style.colour)
    width = (edge.size if edge.size is not None else style.size) * 1.5
    opacity = edge.alpha if edge.alpha is not None else style.alpha

    attrs = f'fill="none" stroke="{stroke}" stroke-width="{_num(width)}"'
    if _DASHES[linetype]:
        attrs += f' stroke-dasharray="{_DASHES[linetype]}"'
    if opacity < 1.0:
        attrs += f' stroke-opacity="{_num(opacity)}"'
    attrs += ' marker-end="url(#arrowhead)"'
    if edge.kind == EdgeKind.BIDIRECTIONAL:
        attrs += ' marker-start="url(#arrowhead-rev)"'

    d, (lx, ly) = _edge_path(edge, src, dst, canvas)
    parts = [f'<path d="{d}" {attrs}/>']

    if edge.label:
        colour = _escape(edge.label_colour or style.label_colour)
        parts.append(
            f'<text x="{_num(lx)}" y="{_num(ly - _LABEL_OFFSET)}" text-anchor="middle" '
            f'{_font(style, style.font_size - 2)} fill="{colour}">{_escape(edge.label)}</text>'
        )
    return "\n".join(parts)


# ─── Public Renderer ────────────────────────────────────────────────────────


class SvgRenderer:
    """SVG renderer: consumes GraphData, produces an SVG string.

    Args:
        style: Overrides the style stored on the graph.
    """

    def __init__(self, style: GraphStyle | None = None) -> None:
        self.style = style

    def render(self, graph: GraphData) -> str:
        style = self.style or graph.style
        nodes = graph.visible_nodes()
        edges = graph.visible_edges()
        if not nodes:
            return ""

        for node in nodes:
            validate_node(node)
        for edge in edges:
            validate_edge(edge)
        if style.linetype not in LINETYPES:
            raise StyleError(f"Unknown default linetype {style.linetype!r}")

        lookup = {n.name: n for n in nodes}
        canvas = _Canvas(nodes, style)
        w, h = canvas.width, canvas.height

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" viewBox="0 0 {w} {h}">',
            "<defs>",
            '  <marker id="arrowhead" markerWidth="10" markerHeight="7" refX="10" refY="3.5" orient="auto">',
            '    <polygon points="0 0, 10 3.5, 0 7" fill="context-stroke"/>',
            "  </marker>",
            '  <marker id="arrowhead-rev" markerWidth="10" markerHeight="7" refX="0" refY="3.5" orient="auto">',
            '    <polygon points="10 0, 0 3.5, 10 7" fill="context-stroke"/>',
            "  </marker>",
            "</defs>",
            f'<rect width="{w}" height="{h}" fill="white"/>',
        ]

        # Edges (behind nodes), sorted for deterministic output
        for edge in sorted(edges, key=lambda e: (e.from_, e.to)):
            parts.append(_render_edge(edge, lookup[edge.from_], lookup[edge.to], canvas))

        # Nodes (on top)
        for node in nodes:
            parts.append(_render_node(node, canvas))

        parts.append("</svg>")
        return "\n".join(parts)
