"""Build -> layout -> commit cycle for a family tree view."""

import asyncio
import itertools
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from geometry import center_graph
from graph import build_graph, filter_graph_by_depth
from layout import LayoutEngine, LayoutOptions, apply_layout
from log import get_logger
from models import NodeKind, TreeData, TreeEdge, TreeNode

logger = get_logger(__name__)


class LayoutState(str, Enum):
    IDLE = "idle"
    LAYING_OUT = "laying_out"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class GraphSnapshot:
    nodes: tuple[TreeNode, ...] = ()
    edges: tuple[TreeEdge, ...] = ()


EMPTY_SNAPSHOT = GraphSnapshot()


def attach_callbacks(
    nodes: Sequence[TreeNode], callback: Callable[..., Any] | None
) -> list[TreeNode]:
    """Return new person nodes carrying `callback`; union nodes are passed through."""
    if callback is None:
        return list(nodes)
    return [
        replace(node, on_add_relative=callback) if node.kind is NodeKind.PERSON else node
        for node in nodes
    ]


class LayoutOrchestrator:
    """
    Holds the laid-out graph for the current tree data.

    Each call to `update` starts a new request. Requests are numbered, and a
    finished layout is committed only if no newer request has been issued
    since it started, so a slow layout can never overwrite a newer graph.
    """

    def __init__(
        self,
        *,
        engine: LayoutEngine | None = None,
        options: LayoutOptions | None = None,
        timeout: float | None = None,
        center: bool = False,
        on_add_relative: Callable[..., Any] | None = None,
        on_node_click: Callable[[str], Any] | None = None,
    ):
        self.engine = engine
        self.options = options
        self.timeout = timeout
        self.center = center
        self.on_add_relative = on_add_relative
        self.on_node_click = on_node_click

        self.state = LayoutState.IDLE
        self.error: Exception | None = None
        self._snapshot = EMPTY_SNAPSHOT
        self._request_ids = itertools.count(1)
        self._latest_request = 0
        self._current_input: tuple[TreeData | None, str | None, int | None] | None = None

    @property
    def nodes(self) -> tuple[TreeNode, ...]:
        return self._snapshot.nodes

    @property
    def edges(self) -> tuple[TreeEdge, ...]:
        return self._snapshot.edges

    @property
    def snapshot(self) -> GraphSnapshot:
        return self._snapshot

    @property
    def loading(self) -> bool:
        return self.state is LayoutState.LAYING_OUT

    def submit(
        self,
        data: TreeData | None,
        *,
        proband_id: str | None = None,
        max_depth: int | None = None,
    ) -> asyncio.Task:
        """Schedule `update` on the running event loop."""
        return asyncio.create_task(self.update(data, proband_id=proband_id, max_depth=max_depth))

    async def update(
        self,
        data: TreeData | None,
        *,
        proband_id: str | None = None,
        max_depth: int | None = None,
    ) -> bool:
        """
        Rebuild and lay out the graph for new tree data.

        Args:
            data: The tree data to show; None or no persons clears the view
            proband_id: Root person for depth filtering
            max_depth: Keep only nodes this many hops from the proband

        Returns:
            True if this request's result was committed, False if it was
            skipped or superseded by a newer request.
        """
        current_input = (data, proband_id, max_depth)
        if (
            self.state is not LayoutState.ERROR
            and self._current_input is not None
            and _same_input(self._current_input, current_input)
        ):
            return False
        self._current_input = current_input

        request_id = next(self._request_ids)
        self._latest_request = request_id

        if data is None or data.is_empty:
            self.error = None
            self._commit(EMPTY_SNAPSHOT, LayoutState.IDLE)
            return True

        self.state = LayoutState.LAYING_OUT
        self.error = None

        try:
            nodes, edges = build_graph(data)
            if proband_id is not None and max_depth is not None:
                nodes, edges = filter_graph_by_depth(nodes, edges, proband_id, max_depth)

            laid_out = await apply_layout(
                nodes, edges, self.options, engine=self.engine, timeout=self.timeout
            )
            if self.center:
                laid_out = center_graph(laid_out)
            laid_out = attach_callbacks(laid_out, self.on_add_relative)
        except asyncio.CancelledError:
            if request_id == self._latest_request:
                # Keep the previous graph; the same input may be submitted again
                self._current_input = None
                self.state = LayoutState.READY if self._snapshot.nodes else LayoutState.IDLE
                logger.info("layout_cancelled", request_id=request_id)
            raise
        except Exception as exc:
            if request_id != self._latest_request:
                logger.info("layout_discarded", request_id=request_id, reason="superseded")
                return False
            logger.error("layout_pipeline_failed", request_id=request_id, error=repr(exc))
            self.error = exc
            self._commit(EMPTY_SNAPSHOT, LayoutState.ERROR)
            return False

        if request_id != self._latest_request:
            logger.info(
                "layout_discarded",
                request_id=request_id,
                latest_request=self._latest_request,
                reason="superseded",
            )
            return False

        self._commit(GraphSnapshot(tuple(laid_out), tuple(edges)), LayoutState.READY)
        logger.debug("layout_committed", request_id=request_id, nodes=len(laid_out))
        return True

    def click(self, node_id: str) -> bool:
        """Notify `on_node_click` about a click on a person node."""
        if self.on_node_click is None:
            return False
        for node in self._snapshot.nodes:
            if node.id == node_id:
                if node.kind is not NodeKind.PERSON:
                    return False
                self.on_node_click(node_id)
                return True
        return False

    def _commit(self, snapshot: GraphSnapshot, state: LayoutState) -> None:
        self._snapshot = snapshot
        self.state = state


def _same_input(
    previous: tuple[TreeData | None, str | None, int | None],
    current: tuple[TreeData | None, str | None, int | None],
) -> bool:
    # Tree data is compared by identity; a re-fetch always yields a new object
    return previous[0] is current[0] and previous[1:] == current[1:]
