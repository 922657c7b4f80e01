"""Tests for graph bounds and centering."""

import pytest

from geometry import Bounds, calculate_graph_bounds, center_graph
from models import Person, Position, TreeNode, Union


def person_at(node_id, x, y):
    return TreeNode.for_person(Person(id=node_id)).moved_to(x, y)


def union_at(node_id, x, y):
    return TreeNode.for_union(Union(union_id=node_id, p1="P1")).moved_to(x, y)


class TestCalculateGraphBounds:
    def test_empty(self):
        assert calculate_graph_bounds([]) == Bounds(0, 0, 0, 0, 0, 0)

    def test_single_person(self):
        bounds = calculate_graph_bounds([person_at("P1", 10, 20)])

        assert bounds == Bounds(10, 20, 190, 100, 180, 80)

    def test_uses_footprint_per_kind(self):
        nodes = [person_at("P1", 0, 0), union_at("U1", 300, 150)]

        bounds = calculate_graph_bounds(nodes)

        assert (bounds.max_x, bounds.max_y) == (320, 170)
        assert (bounds.width, bounds.height) == (320, 170)

    def test_negative_positions(self):
        bounds = calculate_graph_bounds([person_at("P1", -100, -50), person_at("P2", 100, 50)])

        assert bounds.min_x == -100
        assert bounds.min_y == -50
        assert bounds.center == (90, 40)


class TestCenterGraph:
    def test_center_at_origin(self):
        nodes = [
            person_at("P1", 0, 0),
            person_at("P2", 210, 0),
            union_at("U1", 190, 30),
            person_at("C1", 105, 130),
        ]

        bounds = calculate_graph_bounds(center_graph(nodes))

        assert bounds.min_x + bounds.max_x == pytest.approx(0)
        assert bounds.min_y + bounds.max_y == pytest.approx(0)

    def test_preserves_relative_positions(self):
        nodes = [person_at("P1", 0, 0), person_at("P2", 300, 100)]

        centered = center_graph(nodes)

        dx = centered[1].position.x - centered[0].position.x
        dy = centered[1].position.y - centered[0].position.y
        assert (dx, dy) == (300, 100)

    def test_does_not_mutate_input(self):
        nodes = [person_at("P1", 40, 40)]

        centered = center_graph(nodes)

        assert nodes[0].position == Position(40, 40)
        assert centered[0].position == Position(-90, -40)

    def test_empty(self):
        assert center_graph([]) == []
