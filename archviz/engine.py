"""The layout pipeline: placement, refinement, routing and centring."""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, MutableSequence, Optional, Sequence

from archviz.grid import Grid
from archviz.placement import (
    effective_geometry,
    find_overlaps,
    force_directed,
    has_overlaps,
    initial_placement,
)
from archviz.routing import EdgeSpec, route_edges
from archviz.types import (
    Edge,
    InvalidEdgeIndex,
    InvalidNodeIndex,
    LayoutEdge,
    LayoutNode,
    LayoutResult,
    Node,
    Position,
    Size,
)

logger = logging.getLogger(__name__)

_ROUTING_CLEARANCE = 15.0
_MIN_CANVAS_WIDTH = 400.0
_MIN_CANVAS_HEIGHT = 300.0


def _edge_spec(edge: Sequence) -> EdgeSpec:
    """Normalise an edge given as (source, target[, source_port[, target_port]])."""
    values = tuple(edge)
    if not 2 <= len(values) <= 4:
        raise ValueError(f"an edge needs 2 to 4 fields, got {len(values)}")
    padded = values + (None,) * (4 - len(values))
    return padded[0], padded[1], padded[2], padded[3]


def _extent(nodes: Iterable[Node], edges: Iterable[Edge]) -> tuple[float, float, float, float]:
    """Bounding box (min_x, max_x, min_y, max_y) of node rectangles and edge paths."""
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for node in nodes:
        min_x = min(min_x, node.position.x)
        max_x = max(max_x, node.position.x + node.size.width)
        min_y = min(min_y, node.position.y)
        max_y = max(max_y, node.position.y + node.size.height)
    for edge in edges:
        for point in edge.path:
            min_x = min(min_x, point.x)
            max_x = max(max_x, point.x)
            min_y = min(min_y, point.y)
            max_y = max(max_y, point.y)
    return min_x, max_x, min_y, max_y


def calculate_canvas_size(
    nodes: Sequence[Node], edges: Sequence[Edge], min_spacing: float
) -> tuple[float, float]:
    """Canvas size that holds all nodes and edge paths plus a margin on each side."""
    min_x, max_x, min_y, max_y = _extent(nodes, edges)
    width = max(max_x - min_x, _MIN_CANVAS_WIDTH) + 2.0 * min_spacing
    height = max(max_y - min_y, _MIN_CANVAS_HEIGHT) + 2.0 * min_spacing
    return width, height


def center_layout(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    canvas_width: float,
    canvas_height: float,
    grid: Optional[Grid] = None,
) -> None:
    """Shift nodes, edge paths and the grid origin so the drawing is centred on the canvas."""
    min_x, max_x, min_y, max_y = _extent(nodes, edges)
    offset_x = (canvas_width - (max_x - min_x)) / 2.0 - min_x
    offset_y = (canvas_height - (max_y - min_y)) / 2.0 - min_y

    for node in nodes:
        node.position.x += offset_x
        node.position.y += offset_y
    for edge in edges:
        for point in edge.path:
            point.x += offset_x
            point.y += offset_y
    if grid is not None:
        grid.origin_x += offset_x
        grid.origin_y += offset_y


def _log_overlaps(
    nodes: Sequence[Node],
    effective_bounds: Sequence[tuple[float, float, float, float]],
    effective_sizes: Sequence[Size],
) -> None:
    overlaps = find_overlaps(nodes, effective_bounds)
    if not overlaps:
        logger.debug("OVERLAP DETECTION: No overlapping nodes found")
        return
    logger.debug("OVERLAP DETECTION: Found %d overlapping node pairs:", len(overlaps))
    for i, j in overlaps:
        a, b = nodes[i], nodes[j]
        logger.debug(
            "  %s (%.1f,%.1f effective size %.1fx%.1f) overlaps with "
            "%s (%.1f,%.1f effective size %.1fx%.1f)",
            a.id, a.position.x, a.position.y,
            effective_sizes[i].width, effective_sizes[i].height,
            b.id, b.position.x, b.position.y,
            effective_sizes[j].width, effective_sizes[j].height,
        )


@dataclass
class ArchVizLayout:
    """Settings of the layout engine."""

    iterations: int = 100
    repulsion_strength: float = 1000.0
    attraction_strength: float = 0.1
    initial_spacing: float = 100.0
    min_spacing: float = 20.0
    allow_diagonals: bool = True
    spaced_edges: bool = False

    def layout(self, nodes: Iterable[Node], edges: Iterable[Sequence]) -> LayoutResult:
        """Place the nodes, route the edges and centre the drawing.

        The given nodes are left untouched; the result holds positioned copies.
        """
        nodes = copy.deepcopy(list(nodes))
        specs = [_edge_spec(edge) for edge in edges]

        effective_bounds, effective_sizes = effective_geometry(nodes)
        config = replace(self, min_spacing=max(_ROUTING_CLEARANCE, self.min_spacing))

        initial_placement(nodes, specs, config.initial_spacing, config.min_spacing)
        config._refine(nodes, specs, config.initial_spacing, False, effective_sizes, effective_bounds)

        overlapping = has_overlaps(nodes, effective_bounds)
        if overlapping:
            logger.debug(
                "OVERLAP DETECTION: Overlaps found after initial refinement, "
                "running overlap prevention phase"
            )
            config._refine(nodes, specs, config.min_spacing, True, effective_sizes, effective_bounds)
        else:
            logger.debug("OVERLAP DETECTION: No overlaps after initial refinement")

        if logger.isEnabledFor(logging.DEBUG):
            _log_overlaps(nodes, effective_bounds, effective_sizes)

        routed, grid = route_edges(nodes, specs)
        canvas_width, canvas_height = calculate_canvas_size(nodes, routed, config.min_spacing)
        center_layout(nodes, routed, canvas_width, canvas_height, grid)

        return LayoutResult(
            nodes=nodes,
            edges=routed,
            canvas_width=canvas_width,
            canvas_height=canvas_height,
            grid=grid,
        )

    def _refine(
        self,
        nodes: Sequence[Node],
        edges: Sequence[EdgeSpec],
        spacing: float,
        prevent_overlaps: bool,
        effective_sizes: Sequence[Size],
        effective_bounds: Sequence[tuple[float, float, float, float]],
    ) -> None:
        force_directed(
            nodes,
            edges,
            spacing,
            prevent_overlaps,
            effective_sizes,
            effective_bounds,
            self.iterations,
            self.repulsion_strength,
            self.attraction_strength,
        )

    def route_edges_only(
        self, nodes: Iterable[Node], edges: Iterable[Sequence]
    ) -> list[Edge]:
        """Route edges between nodes at their current positions, leaving the nodes untouched."""
        working = copy.deepcopy(list(nodes))
        routed, _ = route_edges(working, [_edge_spec(edge) for edge in edges])
        return routed

    def layout_in_place(
        self,
        nodes: MutableSequence[LayoutNode],
        edges: MutableSequence[LayoutEdge],
    ) -> None:
        """Lay out caller-owned nodes and edges, writing positions and paths back to them."""
        internal_nodes = [
            Node(
                id=node.id,
                size=Size(node.size.width, node.size.height),
                position=Position(node.position.x, node.position.y),
                ports=copy.deepcopy(list(node.ports)),
            )
            for node in nodes
        ]
        specs = [
            (edge.source, edge.target, edge.source_port, edge.target_port) for edge in edges
        ]

        result = self.layout(internal_nodes, specs)

        for index, node in enumerate(result.nodes):
            if index >= len(nodes):
                raise InvalidNodeIndex(f"layout produced node {index} of {len(nodes)}")
            nodes[index].position = node.position
        for index, edge in enumerate(result.edges):
            if index >= len(edges):
                raise InvalidEdgeIndex(f"layout produced edge {index} of {len(edges)}")
            edges[index].path = edge.path


def layout_in_place(
    nodes: MutableSequence[LayoutNode],
    edges: MutableSequence[LayoutEdge],
    config: ArchVizLayout,
) -> None:
    """Lay out caller-owned nodes and edges with the given settings."""
    config.layout_in_place(nodes, edges)