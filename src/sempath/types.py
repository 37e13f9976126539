"""Shared enums for node shapes, edge kinds and connection sides."""

from __future__ import annotations

from enum import Enum


class NodeShape(Enum):
    """Drawn shape of a node: rectangles for observed, ovals for latent variables."""

    RECTANGLE = "rect"
    OVAL = "oval"


class EdgeKind(Enum):
    """Directed paths (loadings, regressions) vs bidirectional covariances."""

    DIRECTED = "directed"
    BIDIRECTIONAL = "bidirectional"


class Side(Enum):
    """Compass side of a node at which an edge attaches."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> Side:
        return _OPPOSITE[self]

    @property
    def is_vertical(self) -> bool:
        return self in (Side.TOP, Side.BOTTOM)


_OPPOSITE: dict[Side, Side] = {
    Side.TOP: Side.BOTTOM,
    Side.BOTTOM: Side.TOP,
    Side.LEFT: Side.RIGHT,
    Side.RIGHT: Side.LEFT,
}


class LayoutAlgorithm(Enum):
    """Placement algorithms understood by ``auto_layout``."""

    TREE = "tree"
    CIRCLE = "circle"
    GRID = "grid"
    SPRING = "spring"
    SHELL = "shell"
