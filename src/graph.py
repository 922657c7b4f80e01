"""Layout graph construction and depth-bounded subgraph extraction."""

from collections.abc import Sequence

import networkx as nx

from log import get_logger
from models import EdgeKind, TreeData, TreeEdge, TreeNode

logger = get_logger(__name__)


def build_graph(data: TreeData) -> tuple[list[TreeNode], list[TreeEdge]]:
    """
    Build the layout graph using the union-node model.

    Each union becomes a small connector node: partners point at it and the
    union's children hang from it, so partners share a generation and siblings
    align. Parents who appear in no union skip the connector and point straight
    at their children.

    Args:
        data: Relational tree data from the data source

    Returns:
        (nodes, edges) with every node positioned at (0, 0)
    """
    nodes: list[TreeNode] = []
    edges: list[TreeEdge] = []

    # Person cards
    for person in data.persons:
        nodes.append(TreeNode.for_person(person))

    # Union connectors
    for union in data.unions:
        nodes.append(TreeNode.for_union(union))

    # Partners -> union
    for union in data.unions:
        for partner in union.partners:
            edges.append(
                TreeEdge(
                    id=f"{partner}-{union.union_id}",
                    source=partner,
                    target=union.union_id,
                    kind=EdgeKind.PARTNER_TO_UNION,
                )
            )

    # Union -> child
    for uc in data.union_children:
        edges.append(
            TreeEdge(
                id=f"{uc.union_id}-{uc.child_id}",
                source=uc.union_id,
                target=uc.child_id,
                kind=EdgeKind.UNION_TO_CHILD,
            )
        )

    # Unioned parents are linked to their children through UnionChild only
    unioned_parents: set[str] = set()
    for union in data.unions:
        unioned_parents.update(union.partners)

    # Direct parent -> child edges for parents without any union
    for pc in data.parent_child:
        if pc.parent_id in unioned_parents:
            continue
        edges.append(
            TreeEdge(
                id=f"{pc.parent_id}-{pc.child_id}",
                source=pc.parent_id,
                target=pc.child_id,
                kind=EdgeKind.PARENT_TO_CHILD,
            )
        )

    logger.debug(
        "graph_built",
        persons=len(data.persons),
        unions=len(data.unions),
        nodes=len(nodes),
        edges=len(edges),
    )
    return nodes, edges


def filter_graph_by_depth(
    nodes: Sequence[TreeNode],
    edges: Sequence[TreeEdge],
    proband_id: str,
    max_depth: int,
) -> tuple[list[TreeNode], list[TreeEdge]]:
    """
    Keep only nodes within `max_depth` hops of the proband.

    Hops are counted on an undirected view of the graph, so partners, union
    connectors, parents and children are all reachable from each other. An edge
    survives only if both of its endpoints do.

    Args:
        nodes: All layout nodes
        edges: All layout edges
        proband_id: The person to measure distances from
        max_depth: Maximum hop distance to keep (negative values act as 0)

    Returns:
        The filtered (nodes, edges), preserving input order. Empty if the
        proband is not among `nodes`.
    """
    node_ids = {node.id for node in nodes}
    if proband_id not in node_ids:
        return [], []

    # Symmetric adjacency: every edge is walkable in both directions
    undirected = nx.Graph()
    undirected.add_nodes_from(node_ids)
    undirected.add_edges_from((edge.source, edge.target) for edge in edges)

    distances = nx.single_source_shortest_path_length(
        undirected, proband_id, cutoff=max(max_depth, 0)
    )
    kept = {node_id for node_id in distances if node_id in node_ids}

    filtered_nodes = [node for node in nodes if node.id in kept]
    filtered_edges = [edge for edge in edges if edge.source in kept and edge.target in kept]
    return filtered_nodes, filtered_edges
