"""Static preview of a laid-out family tree graph."""

from collections.abc import Sequence
from pathlib import Path

from matplotlib.figure import Figure
from matplotlib.patches import Circle, FancyBboxPatch

from geometry import calculate_graph_bounds
from log import get_logger
from models import Gender, NodeKind, TreeEdge, TreeNode

logger = get_logger(__name__)

FILL_COLORS = {
    Gender.MALE: "lightblue",
    Gender.FEMALE: "lightpink",
}
EDGE_COLOR = "darkgray"
MARGIN = 40


def _person_label(node: TreeNode) -> str:
    person = node.person
    birth_year = person.birth_date[:4] if person.birth_date else ""
    death_year = person.death_date[:4] if person.death_date else ""
    years = f"{birth_year}-{death_year}" if (birth_year or death_year) else ""
    return f"{person.display_name}\n{years}".strip()


def _anchor(node: TreeNode, bottom: bool) -> tuple[float, float]:
    x = node.position.x + node.size.width / 2
    y = node.position.y + (node.size.height if bottom else 0)
    return x, y


def plot_graph(nodes: Sequence[TreeNode], edges: Sequence[TreeEdge], output_path: Path) -> None:
    """
    Draw laid-out nodes as cards and union connectors, with elbow edges.

    Positions are top-left corners with y growing downward, as produced by
    `layout.apply_layout`. The image format follows the file extension
    (png, svg or pdf; anything else falls back to png).
    """
    by_id = {node.id: node for node in nodes}
    bounds = calculate_graph_bounds(nodes)

    fig_w = max(bounds.width + 2 * MARGIN, 200) / 100
    fig_h = max(bounds.height + 2 * MARGIN, 200) / 100
    fig = Figure(figsize=(fig_w, fig_h))
    ax = fig.subplots()

    # Edges: down from the source, across, down into the target
    for edge in edges:
        source = by_id.get(edge.source)
        target = by_id.get(edge.target)
        if source is None or target is None:
            continue
        sx, sy = _anchor(source, bottom=True)
        tx, ty = _anchor(target, bottom=False)
        mid_y = (sy + ty) / 2
        ax.plot([sx, sx, tx, tx], [sy, mid_y, mid_y, ty], color=EDGE_COLOR, linewidth=1, zorder=1)

    for node in nodes:
        if node.kind is NodeKind.UNION:
            cx, cy = _anchor(node, bottom=False)
            radius = node.size.width / 2
            ax.add_patch(Circle((cx, cy + radius), radius, color=EDGE_COLOR, zorder=2))
            continue

        fillcolor = FILL_COLORS.get(node.person.gender, "lightgray")
        ax.add_patch(
            FancyBboxPatch(
                (node.position.x, node.position.y),
                node.size.width,
                node.size.height,
                boxstyle="round,pad=0,rounding_size=8",
                facecolor=fillcolor,
                edgecolor="gray",
                zorder=2,
            )
        )
        cx, cy = _anchor(node, bottom=False)
        ax.text(
            cx,
            cy + node.size.height / 2,
            _person_label(node),
            ha="center",
            va="center",
            fontsize=8,
            zorder=3,
        )

    ax.set_xlim(bounds.min_x - MARGIN, bounds.max_x + MARGIN)
    # Ancestors at top
    ax.set_ylim(bounds.max_y + MARGIN, bounds.min_y - MARGIN)
    ax.set_aspect("equal")
    ax.axis("off")

    ext = output_path.suffix.lower().lstrip(".")
    if ext not in ("png", "svg", "pdf"):
        ext = "png"

    fig.savefig(output_path, format=ext, bbox_inches="tight")
    logger.info("graph_plotted", path=str(output_path), nodes=len(nodes), edges=len(edges))
