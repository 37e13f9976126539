"""Style configuration shared by the preparer, router and renderer."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

# Routing geometry (degrees of bend; 0 is a straight line).
COVARIANCE_CURVATURE: float = 60.0
PARALLEL_STEP: float = 30.0
MAX_CURVATURE: float = 150.0
SELF_LOOP_CURVATURE: float = 180.0

LINETYPES: frozenset[str] = frozenset({"solid", "dashed", "dotted", "dotdash", "longdash", "twodash", "blank"})


@dataclass(frozen=True)
class GraphStyle:
    """Global drawing defaults.

    Distances are in layout units; ``px_per_unit`` converts them to SVG pixels.
    Per-node and per-edge visual fields left as ``None`` fall back to these.

    Attributes:
        spacing_x: Horizontal distance between adjacent layout columns.
        spacing_y: Vertical distance between adjacent layout rows.
        rect_width, rect_height: Size of observed-variable rectangles.
        ellipse_width, ellipse_height: Size of latent-variable ovals.
        linetype: Default edge line type (one of ``LINETYPES``).
        colour: Default stroke colour for nodes and edges.
        alpha: Default opacity in [0, 1].
        size: Default stroke width multiplier.
        fill: Default node fill colour.
        label_colour: Default text colour.
    """

    spacing_x: float = 2.0
    spacing_y: float = 2.0
    rect_width: float = 1.2
    rect_height: float = 0.8
    ellipse_width: float = 1.0
    ellipse_height: float = 1.0
    linetype: str = "solid"
    colour: str = "black"
    alpha: float = 1.0
    size: float = 1.0
    fill: str = "white"
    label_colour: str = "black"
    px_per_unit: int = 60
    font_size: int = 14
    font_family: str = "sans-serif"
    padding: int = 20

    def replace(self, **changes: object) -> GraphStyle:
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


DEFAULT_STYLE = GraphStyle()
