"""Bounding box and centering helpers for laid-out nodes."""

from collections.abc import Sequence
from typing import NamedTuple

from models import TreeNode


class Bounds(NamedTuple):
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.min_x + self.width / 2, self.min_y + self.height / 2)


def calculate_graph_bounds(nodes: Sequence[TreeNode]) -> Bounds:
    """Smallest rectangle containing every node's footprint. All zeros for no nodes."""
    if not nodes:
        return Bounds(0, 0, 0, 0, 0, 0)

    min_x = min(node.position.x for node in nodes)
    min_y = min(node.position.y for node in nodes)
    max_x = max(node.position.x + node.size.width for node in nodes)
    max_y = max(node.position.y + node.size.height for node in nodes)

    return Bounds(min_x, min_y, max_x, max_y, max_x - min_x, max_y - min_y)


def center_graph(nodes: Sequence[TreeNode]) -> list[TreeNode]:
    """Translate nodes so the centre of their bounding box sits at (0, 0)."""
    center_x, center_y = calculate_graph_bounds(nodes).center
    return [
        node.moved_to(node.position.x - center_x, node.position.y - center_y) for node in nodes
    ]
