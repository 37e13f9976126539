"""Edge routing: choose the node side each edge leaves from and arrives at.

Coordinates are screen coordinates: x grows to the right, y grows downward.
The bearing of an edge is measured from straight up (0°), clockwise. An edge
whose bearing deviates from the vertical axis by at most ``angle`` degrees
is routed vertically (top/bottom sides); any other edge is routed
horizontally (left/right sides). ``angle=None`` routes vertically whenever
the vertical distance is at least the horizontal one.

Curvature is assigned per unordered node pair so parallel edges (and
covariances, which always bend) do not overlap.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Mapping

from sempath.config import (
    COVARIANCE_CURVATURE,
    MAX_CURVATURE,
    PARALLEL_STEP,
    SELF_LOOP_CURVATURE,
)
from sempath.errors import DegenerateEdgeError, LayoutMismatchError
from sempath.graph import Edge, EdgeTable, Node
from sempath.types import EdgeKind, Side

logger = logging.getLogger(__name__)


def bearing(dx: float, dy: float) -> float:
    """Compass bearing in degrees of (dx, dy): 0 is up, 90 is right."""
    return math.degrees(math.atan2(dx, -dy)) % 360.0


def vertical_deviation(dx: float, dy: float) -> float:
    """Absolute deviation of (dx, dy) from the vertical axis, in [0, 90]."""
    folded = bearing(dx, dy) % 180.0
    return min(folded, 180.0 - folded)


def _check_angle(angle: float | None) -> None:
    if angle is not None and not 0.0 <= angle <= 180.0:
        raise ValueError(f"angle must be between 0 and 180 degrees, got {angle}")


def connect_sides(
    from_xy: tuple[float, float],
    to_xy: tuple[float, float],
    angle: float | None = None,
) -> tuple[Side, Side]:
    """Return (connect_from, connect_to) for an edge between two node centres.

    The two sides are always opposites. Coincident points are rejected by
    ``route_edges``; here they route vertically, upward.

    ``angle=None`` is not ``angle=0``: it picks the sides facing the larger
    displacement (vertical when ``|dy| >= |dx|``, a 45° threshold), while
    ``angle=0`` routes vertically only when the nodes share a column.
    """
    _check_angle(angle)
    dx = to_xy[0] - from_xy[0]
    dy = to_xy[1] - from_xy[1]

    if angle is None:
        vertical = abs(dy) >= abs(dx)
    else:
        vertical = vertical_deviation(dx, dy) <= angle

    if vertical:
        side = Side.BOTTOM if dy > 0 else Side.TOP
    else:
        side = Side.RIGHT if dx > 0 else Side.LEFT
    return side, side.opposite


def _base_curvature(edge: Edge) -> float:
    return COVARIANCE_CURVATURE if edge.kind == EdgeKind.BIDIRECTIONAL else 0.0


def assign_curvature(edges: Iterable[Edge]) -> None:
    """Set ``curvature`` on every edge, grouping edges by unordered pair.

    A lone directed edge is straight; a lone covariance bends by
    ``COVARIANCE_CURVATURE``. Edges sharing a pair are staggered with
    alternating sign, oriented against the sorted pair so that a→b and b→a
    bend to different sides. Self-loops get ``SELF_LOOP_CURVATURE``.
    """
    groups: dict[tuple[str, str], list[Edge]] = defaultdict(list)
    for edge in edges:
        if edge.is_self_loop:
            edge.curvature = SELF_LOOP_CURVATURE
        else:
            groups[edge.pair].append(edge)

    for pair, group in groups.items():
        if len(group) == 1:
            group[0].curvature = _base_curvature(group[0])
            continue
        for i, edge in enumerate(group):
            magnitude = min(max(_base_curvature(edge), PARALLEL_STEP) + PARALLEL_STEP * (i // 2), MAX_CURVATURE)
            sign = 1.0 if i % 2 == 0 else -1.0
            if (edge.from_, edge.to) != pair:
                sign = -sign
            edge.curvature = sign * magnitude


def _centre(node: Node) -> tuple[float, float]:
    if node.x is None or node.y is None:
        raise LayoutMismatchError("Node has no coordinates; prepare the graph first", {"node": node.name})
    return (node.x, node.y)


def route_edges(
    nodes: Iterable[Node] | Mapping[str, Node],
    edges: EdgeTable | Iterable[Edge],
    *,
    angle: float | None = None,
) -> EdgeTable:
    """Fill ``connect_from``, ``connect_to`` and ``curvature`` on every edge.

    Edges are updated in place and returned as an EdgeTable. ``angle`` is the
    threshold in degrees from vertical; the default ``None`` uses the 45°
    nearest-sides rule of ``connect_sides`` rather than the strict
    ``angle=0`` rule, under which any horizontal offset routes sideways.

    Raises:
        ValueError: ``angle`` outside [0, 180].
        LayoutMismatchError: An endpoint is unknown or has no coordinates.
        DegenerateEdgeError: Two distinct endpoints share the same position.
    """
    _check_angle(angle)
    lookup = dict(nodes) if isinstance(nodes, Mapping) else {n.name: n for n in nodes}
    table = edges if isinstance(edges, EdgeTable) else EdgeTable(edges)

    for edge in table:
        try:
            src, dst = lookup[edge.from_], lookup[edge.to]
        except KeyError as exc:
            raise LayoutMismatchError(
                "Edge endpoint is not a known node",
                {"edge": f"{edge.from_}->{edge.to}", "missing": exc.args[0]},
            ) from None

        if edge.is_self_loop:
            edge.connect_from = edge.connect_to = Side.TOP
            continue

        from_xy, to_xy = _centre(src), _centre(dst)
        if math.isclose(from_xy[0], to_xy[0]) and math.isclose(from_xy[1], to_xy[1]):
            raise DegenerateEdgeError(
                "Edge joins two distinct nodes at the same position",
                {"edge": f"{edge.from_}->{edge.to}", "position": from_xy},
            )
        edge.connect_from, edge.connect_to = connect_sides(from_xy, to_xy, angle)
        logger.debug("Routed %s -> %s via %s/%s", edge.from_, edge.to, edge.connect_from.value, edge.connect_to.value)

    assign_curvature(table)
    return table
