"""Port selection and orthogonal edge routing on an occupancy grid."""

from __future__ import annotations

import enum
import logging
import math
from typing import Optional, Sequence

from archviz.grid import Grid, _round_half_away, nearest_grid
from archviz.types import Edge, Node, Port, Position

logger = logging.getLogger(__name__)

CELL_SIZE = 5.0
_SIDE_TOLERANCE = 10.0
_FALLBACK_EXTENSION = 25.0
_SNAP = 10.0

EdgeSpec = tuple[int, int, Optional[int], Optional[int]]


class Side(enum.Enum):
    """The side of a node a port sits on."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


def _port_center(node: Node, port: Port) -> Position:
    """World position of a port's centre."""
    return Position(
        node.position.x + port.position.x + port.size.width / 2.0,
        node.position.y + port.position.y + port.size.height / 2.0,
    )


def _node_center(node: Node) -> Position:
    return Position(
        node.position.x + node.size.width / 2.0,
        node.position.y + node.size.height / 2.0,
    )


def _snapped_center(node: Node) -> Position:
    """The node centre snapped to a 10-unit raster, kept inside the node."""
    center = _node_center(node)
    x = _round_half_away(center.x / _SNAP) * _SNAP
    y = _round_half_away(center.y / _SNAP) * _SNAP
    x = min(max(x, node.position.x), node.position.x + node.size.width)
    y = min(max(y, node.position.y), node.position.y + node.size.height)
    return Position(x, y)


def port_side(pos: Position, node: Node) -> Side:
    """The side of ``node`` that a connection point at ``pos`` belongs to."""
    if abs(pos.x - node.position.x) < _SIDE_TOLERANCE:
        return Side.LEFT
    if abs(pos.x - (node.position.x + node.size.width)) < _SIDE_TOLERANCE:
        return Side.RIGHT
    if abs(pos.y - node.position.y) < _SIDE_TOLERANCE:
        return Side.TOP
    return Side.BOTTOM


def extension_distance(
    grid: Grid, start_x: int, start_y: int, side: Side, cell_size: float
) -> float:
    """Distance from a cell to the nearest free cell in the direction of ``side``.

    Falls back to 25.0 when every cell in that direction is blocked.
    """
    if side is Side.RIGHT:
        for x in range(start_x + 1, grid.width):
            if not grid.obstacles[start_y][x]:
                return (x - start_x) * cell_size
    elif side is Side.LEFT:
        for x in range(start_x - 1, -1, -1):
            if not grid.obstacles[start_y][x]:
                return (start_x - x) * cell_size
    elif side is Side.BOTTOM:
        for y in range(start_y + 1, grid.height):
            if not grid.obstacles[y][start_x]:
                return (y - start_y) * cell_size
    elif side is Side.TOP:
        for y in range(start_y - 1, -1, -1):
            if not grid.obstacles[y][start_x]:
                return (start_y - y) * cell_size
    return _FALLBACK_EXTENSION


def select_port(from_node: Node, to_node: Node) -> tuple[Position, Optional[int]]:
    """The port of ``from_node`` that best faces ``to_node``.

    Returns the port centre and its index, or the snapped node centre and
    ``None`` when no port is suitable.
    """
    from_center = _node_center(from_node)
    to_center = _node_center(to_node)
    dx = to_center.x - from_center.x
    dy = to_center.y - from_center.y
    target_magnitude = math.hypot(dx, dy)

    best_index: Optional[int] = None
    best_score = math.inf
    for index, port in enumerate(from_node.ports):
        center = _port_center(from_node, port)
        port_dx = center.x - from_center.x
        port_dy = center.y - from_center.y
        port_magnitude = math.hypot(port_dx, port_dy)
        if port_magnitude > 0.0 and target_magnitude > 0.0:
            cos_angle = (port_dx * dx + port_dy * dy) / (port_magnitude * target_magnitude)
            score = 1.0 - cos_angle
            if score < best_score:
                best_score = score
                best_index = index

    if best_index is None:
        return _snapped_center(from_node), None
    return _port_center(from_node, from_node.ports[best_index]), best_index


def _resolve_port(
    node: Node, other: Node, port_id: Optional[int]
) -> tuple[Position, int]:
    """Find or assign the port an edge end uses, returning its position and index."""
    if port_id is not None:
        for index, port in enumerate(node.ports):
            if port.id == port_id:
                return _port_center(node, port), index

        free = [index for index, port in enumerate(node.ports) if port.id is None]
        if free:
            other_center = _node_center(other)

            def distance_key(index: int) -> int:
                center = _port_center(node, node.ports[index])
                dx = center.x - other_center.x
                dy = center.y - other_center.y
                return int(dx * dx + dy * dy)

            best = min(free, key=distance_key)
            node.ports[best].id = port_id
            return _port_center(node, node.ports[best]), best

    pos, index = select_port(node, other)
    return pos, index if index is not None else 0


def _extend(pos: Position, side: Side, distance: float) -> Position:
    if side is Side.RIGHT:
        return Position(pos.x + distance, pos.y)
    if side is Side.LEFT:
        return Position(pos.x - distance, pos.y)
    if side is Side.BOTTOM:
        return Position(pos.x, pos.y + distance)
    return Position(pos.x, pos.y - distance)


def _free_cell(grid: Grid, pos: Position) -> None:
    x, y = grid.pos_to_grid(pos)
    grid.obstacles[y][x] = False


def route_edges(
    nodes: Sequence[Node], edges: Sequence[EdgeSpec]
) -> tuple[list[Edge], Grid]:
    """Route every edge orthogonally around the nodes.

    Ports named by id but not yet assigned are bound to the nearest free port
    of the node, which modifies ``nodes``. Self-loops are skipped. Returns the
    routed edges and the grid used for routing.
    """
    grid = Grid.from_nodes(nodes, CELL_SIZE)
    routed: list[Edge] = []

    for source, target, source_port_id, target_port_id in edges:
        if source == target:
            continue
        source_node = nodes[source]
        target_node = nodes[target]

        source_pos, source_port = _resolve_port(source_node, target_node, source_port_id)
        target_pos, target_port = _resolve_port(target_node, source_node, target_port_id)

        source_grid_pos = nearest_grid(source_pos, grid.origin_x, grid.origin_y, CELL_SIZE)
        target_grid_pos = nearest_grid(target_pos, grid.origin_x, grid.origin_y, CELL_SIZE)
        _free_cell(grid, source_grid_pos)
        _free_cell(grid, target_grid_pos)

        ends = []
        for pos, grid_pos, node in (
            (source_pos, source_grid_pos, source_node),
            (target_pos, target_grid_pos, target_node),
        ):
            side = port_side(pos, node)
            cell_x, cell_y = grid.pos_to_grid(grid_pos)
            distance = extension_distance(grid, cell_x, cell_y, side, CELL_SIZE)
            ends.append(
                nearest_grid(
                    _extend(grid_pos, side, distance), grid.origin_x, grid.origin_y, CELL_SIZE
                )
            )
        source_ext_end, target_ext_end = ends
        _free_cell(grid, source_ext_end)
        _free_cell(grid, target_ext_end)

        path = [source_grid_pos, *grid.find_path(source_ext_end, target_ext_end), target_grid_pos]

        if logger.isEnabledFor(logging.DEBUG):
            for p1, p2 in zip(path, path[1:]):
                if p1.x != p2.x and p1.y != p2.y:
                    logger.debug(
                        "WARNING: Diagonal segment calculated: (%s, %s) to (%s, %s)",
                        p1.x, p1.y, p2.x, p2.y,
                    )

        routed.append(
            Edge(
                source=source,
                target=target,
                source_port=source_port,
                target_port=target_port,
                path=path,
            )
        )

    return routed, grid