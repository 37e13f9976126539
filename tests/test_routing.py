"""Tests for routing.py: connection sides and curvature."""

from __future__ import annotations

import itertools

import pytest

from sempath.config import COVARIANCE_CURVATURE, SELF_LOOP_CURVATURE
from sempath.errors import DegenerateEdgeError, LayoutMismatchError
from sempath.graph import Edge, EdgeTable, Node
from sempath.routing import assign_curvature, bearing, connect_sides, route_edges, vertical_deviation
from sempath.types import EdgeKind, Side

# ─── Helpers ──────────────────────────────────────────────────────────────────


def node_at(name: str, x: float, y: float) -> Node:
    return Node(name=name, x=x, y=y)


def bidir(a: str, b: str) -> Edge:
    return Edge(a, b, kind=EdgeKind.BIDIRECTIONAL)


# ─── Geometry ─────────────────────────────────────────────────────────────────


class TestBearing:
    def test_compass_directions(self):
        """0° is up (negative y), increasing clockwise."""
        assert bearing(0, -1) == pytest.approx(0)
        assert bearing(1, 0) == pytest.approx(90)
        assert bearing(0, 1) == pytest.approx(180)
        assert bearing(-1, 0) == pytest.approx(270)

    def test_deviation_folded(self):
        assert vertical_deviation(0, 5) == pytest.approx(0)
        assert vertical_deviation(0, -5) == pytest.approx(0)
        assert vertical_deviation(3, 0) == pytest.approx(90)
        assert vertical_deviation(-1, -1) == pytest.approx(45)
        assert vertical_deviation(1, 1) == pytest.approx(45)


class TestConnectSides:
    def test_horizontal_right(self):
        assert connect_sides((0, 0), (2, 0), angle=0) == (Side.RIGHT, Side.LEFT)

    def test_horizontal_left(self):
        assert connect_sides((2, 0), (0, 0), angle=0) == (Side.LEFT, Side.RIGHT)

    def test_straight_down_is_vertical_at_zero(self):
        assert connect_sides((0, 0), (0, 2), angle=0) == (Side.BOTTOM, Side.TOP)

    def test_straight_up(self):
        assert connect_sides((0, 2), (0, 0), angle=0) == (Side.TOP, Side.BOTTOM)

    def test_zero_angle_any_horizontal_offset_is_horizontal(self):
        assert connect_sides((0, 0), (0.01, 5), angle=0) == (Side.RIGHT, Side.LEFT)
        assert connect_sides((0, 0), (-0.01, -5), angle=0) == (Side.LEFT, Side.RIGHT)

    def test_max_angle_always_vertical(self):
        assert connect_sides((0, 0), (5, 0.01), angle=180) == (Side.BOTTOM, Side.TOP)
        assert connect_sides((0, 0), (5, 0), angle=180)[0].is_vertical

    def test_threshold_boundary(self):
        """A 45° diagonal is vertical for angle ≥ 45, horizontal below."""
        assert connect_sides((0, 0), (1, 1), angle=46) == (Side.BOTTOM, Side.TOP)
        assert connect_sides((0, 0), (1, 1), angle=44) == (Side.RIGHT, Side.LEFT)

    def test_default_prefers_larger_displacement(self):
        assert connect_sides((0, 0), (3, 1)) == (Side.RIGHT, Side.LEFT)
        assert connect_sides((0, 0), (1, 3)) == (Side.BOTTOM, Side.TOP)
        assert connect_sides((0, 2), (2, 0)) == (Side.TOP, Side.BOTTOM)

    @pytest.mark.parametrize("angle", [None, 0, 30, 45, 90, 180])
    def test_sides_are_opposites(self, angle):
        for dx, dy in itertools.product(range(-2, 3), repeat=2):
            if dx == 0 and dy == 0:
                continue
            src, dst = connect_sides((0, 0), (dx, dy), angle)
            assert dst == src.opposite

    @pytest.mark.parametrize("angle", [-1, 180.5])
    def test_invalid_angle(self, angle):
        with pytest.raises(ValueError):
            connect_sides((0, 0), (1, 0), angle)


# ─── Curvature ────────────────────────────────────────────────────────────────


class TestCurvature:
    def test_lone_directed_edge_is_straight(self):
        edges = [Edge("a", "b")]
        assign_curvature(edges)
        assert edges[0].curvature == 0

    def test_lone_covariance_bends(self):
        edges = [bidir("a", "b")]
        assign_curvature(edges)
        assert edges[0].curvature == COVARIANCE_CURVATURE

    def test_path_and_covariance_on_same_pair(self):
        """a → b and a ↔ b get distinct, nonzero curvatures of opposite sign."""
        path, cov = Edge("a", "b"), bidir("a", "b")
        assign_curvature([path, cov])
        assert path.curvature != 0 and cov.curvature != 0
        assert path.curvature != cov.curvature
        assert path.curvature * cov.curvature < 0

    def test_path_and_reversed_covariance_on_same_pair(self):
        """a → b and b ↔ a: same sign, but opposite directions put them on opposite sides."""
        path, cov = Edge("a", "b"), bidir("b", "a")
        assign_curvature([path, cov])
        assert path.curvature > 0 and cov.curvature > 0
        assert path.curvature != cov.curvature

    def test_reciprocal_paths_bend_apart(self):
        """a → b and b → a bend to opposite sides of the a–b chord.

        Curvature is relative to each edge's own direction, so equal values
        on reversed edges put them on different sides.
        """
        ab, ba = Edge("a", "b"), Edge("b", "a")
        assign_curvature([ab, ba])
        assert ab.curvature != 0
        assert ab.curvature == ba.curvature

    def test_three_parallel_edges_are_staggered(self):
        edges = [Edge("a", "b"), Edge("a", "b"), Edge("a", "b")]
        assign_curvature(edges)
        values = [e.curvature for e in edges]
        assert len(set(values)) == 3
        assert 0 not in values

    def test_self_loop_exceeds_everything(self):
        edges = [Edge("a", "a")] + [bidir("a", "b") for _ in range(12)]
        assign_curvature(edges)
        assert edges[0].curvature == SELF_LOOP_CURVATURE
        assert all(abs(e.curvature) < SELF_LOOP_CURVATURE for e in edges[1:])


# ─── route_edges ──────────────────────────────────────────────────────────────


class TestRouteEdges:
    def test_two_nodes_in_a_row(self):
        nodes = [node_at("x", 0, 0), node_at("y", 2, 0)]
        edges = route_edges(nodes, [Edge("x", "y")], angle=0)
        assert isinstance(edges, EdgeTable)
        edge = edges[0]
        assert (edge.connect_from, edge.connect_to) == (Side.RIGHT, Side.LEFT)
        assert edge.curvature == 0

    def test_self_loop(self):
        edges = route_edges([node_at("a", 0, 0)], [Edge("a", "a")], angle=90)
        edge = edges[0]
        assert edge.connect_from == Side.TOP
        assert edge.connect_to == Side.TOP
        assert edge.curvature == SELF_LOOP_CURVATURE

    def test_edges_updated_in_place(self):
        edge = Edge("x", "y")
        route_edges({"x": node_at("x", 0, 0), "y": node_at("y", 0, 2)}, [edge])
        assert edge.connect_from == Side.BOTTOM

    def test_degenerate_edge(self):
        nodes = [node_at("a", 1, 1), node_at("b", 1, 1)]
        with pytest.raises(DegenerateEdgeError):
            route_edges(nodes, [Edge("a", "b")])

    def test_unknown_endpoint(self):
        with pytest.raises(LayoutMismatchError):
            route_edges([node_at("a", 0, 0)], [Edge("a", "z")])

    def test_missing_coordinates(self):
        with pytest.raises(LayoutMismatchError, match="no coordinates"):
            route_edges([Node("a"), node_at("b", 0, 0)], [Edge("a", "b")])

    def test_invalid_angle(self):
        with pytest.raises(ValueError):
            route_edges([node_at("a", 0, 0)], [], angle=200)
