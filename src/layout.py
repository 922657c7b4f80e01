"""Hierarchical layout of the union-node graph using Graphviz dot."""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Protocol

import networkx as nx

from log import get_logger
from models import TreeEdge, TreeNode

logger = get_logger(__name__)

# Graphviz sizes are in inches, positions in points
POINTS_PER_INCH = 72


class Direction(str, Enum):
    DOWN = "DOWN"
    UP = "UP"
    RIGHT = "RIGHT"
    LEFT = "LEFT"


class EdgeRouting(str, Enum):
    ORTHOGONAL = "ORTHOGONAL"
    POLYLINE = "POLYLINE"
    SPLINES = "SPLINES"


class NodePlacement(str, Enum):
    NETWORK_SIMPLEX = "NETWORK_SIMPLEX"
    SIMPLE = "SIMPLE"


RANKDIR = {
    Direction.DOWN: "TB",  # Ancestors at top
    Direction.UP: "BT",
    Direction.RIGHT: "LR",
    Direction.LEFT: "RL",
}

SPLINES = {
    EdgeRouting.ORTHOGONAL: "ortho",
    EdgeRouting.POLYLINE: "polyline",
    EdgeRouting.SPLINES: "spline",
}


@dataclass(frozen=True)
class LayoutOptions:
    """
    Layered layout settings.

    Spacings are in the same logical units as node sizes.
    """

    direction: Direction = Direction.DOWN
    node_spacing: float = 30  # Between siblings in the same layer
    layer_spacing: float = 80  # Between generations
    edge_routing: EdgeRouting = EdgeRouting.ORTHOGONAL
    node_placement: NodePlacement = NodePlacement.NETWORK_SIMPLEX
    merge_edges: bool = True

    def __post_init__(self):
        # Accept plain strings from config files and engine requests
        object.__setattr__(self, "direction", Direction(self.direction))
        object.__setattr__(self, "edge_routing", EdgeRouting(self.edge_routing))
        object.__setattr__(self, "node_placement", NodePlacement(self.node_placement))

    def as_dict(self) -> dict[str, Any]:
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in asdict(self).items()
        }

    def to_graphviz(self) -> dict[str, str]:
        attrs = {
            "rankdir": RANKDIR[self.direction],
            "splines": SPLINES[self.edge_routing],
            "nodesep": _inches(self.node_spacing),
            "ranksep": _inches(self.layer_spacing),
        }
        if self.node_placement is NodePlacement.SIMPLE:
            # Cap network simplex iterations for x placement
            attrs["nslimit"] = "1"
        return attrs


DEFAULT_LAYOUT_OPTIONS = LayoutOptions()


def resolve_options(options: LayoutOptions | Mapping[str, Any] | None) -> LayoutOptions:
    """Merge per-call overrides onto the defaults. Unknown names raise TypeError."""
    if options is None:
        return DEFAULT_LAYOUT_OPTIONS
    if isinstance(options, LayoutOptions):
        return options
    return replace(DEFAULT_LAYOUT_OPTIONS, **options)


def _inches(units: float) -> str:
    return f"{units / POINTS_PER_INCH:.4f}"


class LayoutEngine(Protocol):
    """Anything that can lay out a request built by `build_layout_request`."""

    async def layout(self, graph: dict[str, Any]) -> dict[str, Any]: ...


def build_layout_request(
    nodes: Sequence[TreeNode],
    edges: Sequence[TreeEdge],
    options: LayoutOptions = DEFAULT_LAYOUT_OPTIONS,
) -> dict[str, Any]:
    """
    Translate layout nodes and edges into a layout engine request.

    Returns:
        {"id", "layoutOptions", "children": [{id, width, height}],
         "edges": [{id, sources, targets}]}
    """
    return {
        "id": "root",
        "layoutOptions": options.as_dict(),
        "children": [
            {"id": node.id, "width": node.size.width, "height": node.size.height}
            for node in nodes
        ],
        "edges": [
            {"id": edge.id, "sources": [edge.source], "targets": [edge.target]}
            for edge in edges
        ],
    }


class DotLayoutEngine:
    """
    Layered (Sugiyama) layout via Graphviz dot, driven through networkx and pydot.

    Nodes are fixed-size boxes so dot spaces them by their real footprint.
    Returned x/y are top-left corners with y growing downward, shifted so the
    drawing starts at (0, 0).
    """

    def __init__(self, prog: str = "dot"):
        self.prog = prog

    async def layout(self, graph: dict[str, Any]) -> dict[str, Any]:
        # pydot blocks on the dot subprocess
        return await asyncio.to_thread(self._run, graph)

    def _run(self, graph: dict[str, Any]) -> dict[str, Any]:
        options = LayoutOptions(**graph.get("layoutOptions", {}))
        children = graph.get("children", [])
        if not children:
            return {**graph, "children": []}

        # A DiGraph keeps one edge per (source, target) pair
        G = nx.DiGraph() if options.merge_edges else nx.MultiDiGraph()
        G.graph["graph"] = options.to_graphviz()
        G.graph["node"] = {"shape": "box", "fixedsize": "true"}

        for child in children:
            G.add_node(
                child["id"],
                width=_inches(child["width"]),
                height=_inches(child["height"]),
            )

        for edge in graph.get("edges", []):
            for source in edge["sources"]:
                for target in edge["targets"]:
                    G.add_edge(source, target)

        centers = nx.nx_pydot.pydot_layout(G, prog=self.prog)

        # Graphviz puts the origin bottom-left with y growing upward
        sizes = {child["id"]: (child["width"], child["height"]) for child in children}
        placed = [node_id for node_id in sizes if node_id in centers]
        if not placed:
            return {**graph, "children": [dict(child) for child in children]}

        left = min(centers[n][0] - sizes[n][0] / 2 for n in placed)
        top = max(centers[n][1] + sizes[n][1] / 2 for n in placed)

        laid_out = []
        for child in children:
            child = dict(child)
            center = centers.get(child["id"])
            if center is not None:
                cx, cy = center
                child["x"] = cx - child["width"] / 2 - left
                child["y"] = top - (cy + child["height"] / 2)
            laid_out.append(child)

        return {**graph, "children": laid_out}


async def apply_layout(
    nodes: Sequence[TreeNode],
    edges: Sequence[TreeEdge],
    options: LayoutOptions | Mapping[str, Any] | None = None,
    *,
    engine: LayoutEngine | None = None,
    timeout: float | None = None,
) -> list[TreeNode]:
    """
    Position nodes with a layered layout engine.

    Never raises: if the engine fails, times out, or returns something
    unusable, the input nodes come back unchanged so the caller can still draw.

    Args:
        nodes: Layout nodes (positions are ignored)
        edges: Layout edges
        options: LayoutOptions, or a mapping of LayoutOptions field overrides
        engine: Layout engine to use (default: Graphviz dot)
        timeout: Seconds to wait for the engine before giving up

    Returns:
        New nodes with positions from the engine. Nodes the engine did not
        place keep their position.
    """
    if not nodes:
        return []

    engine = engine or DotLayoutEngine()

    try:
        request = build_layout_request(nodes, edges, resolve_options(options))
        if timeout is None:
            result = await engine.layout(request)
        else:
            result = await asyncio.wait_for(engine.layout(request), timeout)

        positions: dict[str, tuple[float, float]] = {}
        for child in result.get("children") or []:
            x, y = child.get("x"), child.get("y")
            if x is not None and y is not None:
                positions[child["id"]] = (float(x), float(y))
    except Exception as exc:
        logger.warning(
            "layout_failed",
            error=repr(exc),
            nodes=len(nodes),
            edges=len(edges),
        )
        return list(nodes)

    return [
        node.moved_to(*positions[node.id]) if node.id in positions else node for node in nodes
    ]
