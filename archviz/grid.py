"""Occupancy grid for orthogonal edge routing."""

from __future__ import annotations

import math
import sys
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Optional

from archviz.types import Node, Position

_MARGIN = 50.0
_NODE_CLEARANCE = 15.0
_PORT_CLEARANCE_CELLS = 2


def _round_half_away(value: float) -> float:
    """Round to the nearest integer, halves away from zero."""
    if not math.isfinite(value):
        return value
    magnitude = abs(value)
    floor = math.floor(magnitude)
    rounded = floor + 1 if magnitude - floor >= 0.5 else floor
    return float(rounded) if value >= 0 else -float(rounded)


def _to_index(value: float) -> int:
    """Saturating conversion of a float to a non-negative index."""
    if math.isnan(value) or value <= 0:
        return 0
    if math.isinf(value):
        return sys.maxsize
    return int(value)


@dataclass
class Grid:
    """A rectangular grid of cells, each either free or blocked."""

    cell_size: float
    origin_x: float
    origin_y: float
    width: int
    height: int
    obstacles: list[list[bool]] = field(default_factory=list)

    @classmethod
    def from_nodes(cls, nodes: Iterable[Node], cell_size: float) -> "Grid":
        """Build a grid covering the nodes, blocking node and port areas."""
        nodes = list(nodes)
        min_x = min((n.position.x for n in nodes), default=math.inf)
        min_y = min((n.position.y for n in nodes), default=math.inf)
        max_x = max((n.position.x + n.size.width for n in nodes), default=-math.inf)
        max_y = max((n.position.y + n.size.height for n in nodes), default=-math.inf)

        canvas_width = max(max_x - min_x + 200.0, 400.0)
        canvas_height = max(max_y - min_y + 200.0, 300.0)
        width = math.ceil(canvas_width / cell_size) + 1
        height = math.ceil(canvas_height / cell_size) + 1
        obstacles = [[False] * width for _ in range(height)]

        origin_x = min_x - _MARGIN
        origin_y = min_y - _MARGIN

        def block(x1: int, x2: int, y1: int, y2: int) -> None:
            for row in obstacles[max(y1, 0):max(y2, 0)]:
                for x in range(max(x1, 0), max(x2, 0)):
                    row[x] = True

        for node in nodes:
            x1 = math.floor((node.position.x - _NODE_CLEARANCE - origin_x) / cell_size)
            y1 = math.floor((node.position.y - _NODE_CLEARANCE - origin_y) / cell_size)
            x2 = math.ceil(
                (node.position.x + node.size.width + _NODE_CLEARANCE - origin_x) / cell_size
            )
            y2 = math.ceil(
                (node.position.y + node.size.height + _NODE_CLEARANCE - origin_y) / cell_size
            )
            block(x1, min(x2, width), y1, min(y2, height))

        for node in nodes:
            for port in node.ports:
                left = node.position.x + port.position.x - origin_x
                top = node.position.y + port.position.y - origin_y
                x1 = math.floor(left / cell_size) - _PORT_CLEARANCE_CELLS
                y1 = math.floor(top / cell_size) - _PORT_CLEARANCE_CELLS
                x2 = min(
                    math.ceil((left + port.size.width) / cell_size) + _PORT_CLEARANCE_CELLS,
                    width - 1,
                ) + 1
                y2 = min(
                    math.ceil((top + port.size.height) / cell_size) + _PORT_CLEARANCE_CELLS,
                    height - 1,
                ) + 1
                block(x1, min(x2, width), y1, min(y2, height))

        return cls(
            cell_size=cell_size,
            origin_x=origin_x,
            origin_y=origin_y,
            width=width,
            height=height,
            obstacles=obstacles,
        )

    def pos_to_grid(self, pos: Position) -> tuple[int, int]:
        """The cell nearest to a position, clamped to the grid."""
        x = _to_index(_round_half_away((pos.x - self.origin_x) / self.cell_size))
        y = _to_index(_round_half_away((pos.y - self.origin_y) / self.cell_size))
        return min(x, self.width - 1), min(y, self.height - 1)

    def grid_to_pos(self, x: int, y: int) -> Position:
        """The position of a cell's corner."""
        return Position(
            self.origin_x + x * self.cell_size,
            self.origin_y + y * self.cell_size,
        )

    def find_path(self, start: Position, end: Position) -> list[Position]:
        """Shortest orthogonal path between two positions through free cells.

        Falls back to the straight segment [start, end] when both fall into the
        same cell or no path exists.
        """
        start_cell = self.pos_to_grid(start)
        end_cell = self.pos_to_grid(end)
        if start_cell == end_cell:
            return [start, end]

        came_from: dict[tuple[int, int], Optional[tuple[int, int]]] = {start_cell: None}
        queue = deque([start_cell])
        while queue:
            current = queue.popleft()
            if current == end_cell:
                break
            for neighbor in self.neighbors(current):
                if neighbor not in came_from:
                    came_from[neighbor] = current
                    queue.append(neighbor)
        else:
            return [start, end]

        cells = []
        step: Optional[tuple[int, int]] = end_cell
        while step is not None:
            cells.append(step)
            step = came_from[step]
        return [self.grid_to_pos(x, y) for x, y in reversed(cells)]

    def neighbors(self, pos: tuple[int, int]) -> list[tuple[int, int]]:
        """Free orthogonal neighbours in the order left, right, up, down."""
        x, y = pos
        candidates = []
        if x > 0:
            candidates.append((x - 1, y))
        if x < self.width - 1:
            candidates.append((x + 1, y))
        if y > 0:
            candidates.append((x, y - 1))
        if y < self.height - 1:
            candidates.append((x, y + 1))
        return [(cx, cy) for cx, cy in candidates if not self.obstacles[cy][cx]]


def nearest_grid(pos: Position, origin_x: float, origin_y: float, cell_size: float) -> Position:
    """Snap a position to the nearest grid point."""
    gx = _round_half_away((pos.x - origin_x) / cell_size)
    gy = _round_half_away((pos.y - origin_y) / cell_size)
    return Position(origin_x + gx * cell_size, origin_y + gy * cell_size)