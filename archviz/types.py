"""Geometry and graph types shared by the layout engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from archviz.grid import Grid


@dataclass
class Size:
    """Width and height of a rectangle."""

    width: float
    height: float


@dataclass
class Position:
    """A point in layout coordinates."""

    x: float
    y: float


class PortType(enum.Enum):
    """Direction of a port."""

    INPUT = "input"
    OUTPUT = "output"


@dataclass
class Port:
    """A connection point on a node, positioned relative to the node."""

    position: Position
    size: Size
    port_type: PortType
    id: Optional[int] = None


@dataclass
class Node:
    """A rectangular node with optional ports and key/value attributes."""

    id: str
    size: Size
    position: Position = field(default_factory=lambda: Position(0.0, 0.0))
    ports: list[Port] = field(default_factory=list)
    attributes: list[tuple[str, str]] = field(default_factory=list)

    def effective_bounds(self) -> tuple[float, float, float, float]:
        """Bounding box including ports as (min_x, max_x, min_y, max_y), relative to the node."""
        min_x, max_x = 0.0, self.size.width
        min_y, max_y = 0.0, self.size.height
        for port in self.ports:
            min_x = min(min_x, port.position.x)
            max_x = max(max_x, port.position.x + port.size.width)
            min_y = min(min_y, port.position.y)
            max_y = max(max_y, port.position.y + port.size.height)
        return min_x, max_x, min_y, max_y

    def effective_size(self) -> Size:
        """Size of the bounding box including ports."""
        min_x, max_x, min_y, max_y = self.effective_bounds()
        return Size(max_x - min_x, max_y - min_y)


@dataclass
class Edge:
    """A routed connection between two nodes, given by node indices."""

    source: int
    target: int
    source_port: Optional[int] = None
    target_port: Optional[int] = None
    path: list[Position] = field(default_factory=list)


@dataclass
class LayoutResult:
    """Positioned nodes, routed edges and the canvas they fit on."""

    nodes: list[Node]
    edges: list[Edge]
    canvas_width: float
    canvas_height: float
    grid: Optional["Grid"] = None


class LayoutError(Exception):
    """Base class for layout failures."""


class InvalidNodeIndex(LayoutError):
    """A layout result refers to a node that does not exist."""


class InvalidEdgeIndex(LayoutError):
    """A layout result refers to an edge that does not exist."""


class LayoutFailed(LayoutError):
    """The layout could not be computed."""


@runtime_checkable
class LayoutNode(Protocol):
    """Anything with the node attributes the layout reads and writes."""

    id: str
    position: Position
    size: Size
    ports: list[Port]


@runtime_checkable
class LayoutEdge(Protocol):
    """Anything with the edge attributes the layout reads and writes."""

    source: int
    target: int
    source_port: Optional[int]
    target_port: Optional[int]
    path: list[Position]