"""SVG rendering of layout results."""

from __future__ import annotations

import math
import os
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union

from archviz.grid import Grid
from archviz.types import LayoutResult, PortType

_CELL_SIZE = 5.0
_DEFAULT_NODE_FILL = "lightblue"
_PORT_FILLS = {PortType.INPUT: "lightblue", PortType.OUTPUT: "lightcoral"}


def _fmt(value: float) -> str:
    """Format a number the short way: no trailing '.0', no exponent."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value == int(value):
        text = str(int(value))
        return "-0" if value == 0 and math.copysign(1.0, value) < 0 else text
    text = repr(float(value))
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def render_svg(
    result: LayoutResult,
    show_grid: bool = False,
    show_all_ports: bool = False,
    grid: Optional[Grid] = None,
) -> str:
    """SVG markup for a layout result.

    Ports are drawn when ``show_all_ports`` is set or an edge uses them; the
    cells of ``grid`` that are blocked are drawn as red squares.
    """
    used_ports = set()
    for edge in result.edges:
        used_ports.add((edge.source, edge.source_port))
        used_ports.add((edge.target, edge.target_port))

    width = _fmt(result.canvas_width)
    height = _fmt(result.canvas_height)
    parts = [
        f'<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">\n'
        '<rect width="100%" height="100%" fill="white"/>\n'
    ]

    if show_grid:
        for i in range(math.ceil(result.canvas_width / _CELL_SIZE) + 1):
            x = _fmt(i * _CELL_SIZE)
            parts.append(
                f'<line x1="{x}" y1="0" x2="{x}" y2="{height}" '
                'stroke="lightgray" stroke-width="0.5"/>\n'
            )
        for i in range(math.ceil(result.canvas_height / _CELL_SIZE) + 1):
            y = _fmt(i * _CELL_SIZE)
            parts.append(
                f'<line x1="0" y1="{y}" x2="{width}" y2="{y}" '
                'stroke="lightgray" stroke-width="0.5"/>\n'
            )

    if grid is not None:
        cell = _fmt(_CELL_SIZE)
        for y, row in enumerate(grid.obstacles[: grid.height]):
            for x, blocked in enumerate(row[: grid.width]):
                if blocked:
                    pos_x = _fmt(grid.origin_x + x * _CELL_SIZE)
                    pos_y = _fmt(grid.origin_y + y * _CELL_SIZE)
                    parts.append(
                        f'<rect x="{pos_x}" y="{pos_y}" width="{cell}" height="{cell}" '
                        'fill="red" fill-opacity="0.3" stroke="red" stroke-width="0.5"/>\n'
                    )

    for node in result.nodes:
        fill = next((v for k, v in node.attributes if k == "color"), _DEFAULT_NODE_FILL)
        parts.append(
            f'<rect x="{_fmt(node.position.x)}" y="{_fmt(node.position.y)}" '
            f'width="{_fmt(node.size.width)}" height="{_fmt(node.size.height)}" '
            f'fill="{fill}" stroke="black"/>\n'
            f'<text x="{_fmt(node.position.x + node.size.width / 2.0)}" '
            f'y="{_fmt(node.position.y + node.size.height / 2.0 + 5.0)}" '
            f'font-family="Arial" font-size="12" text-anchor="middle">{node.id}</text>\n'
        )

    for edge in result.edges:
        if len(edge.path) >= 2:
            first, *rest = edge.path
            data = " ".join(
                [f"M {_fmt(first.x)} {_fmt(first.y)}"]
                + [f"L {_fmt(p.x)} {_fmt(p.y)}" for p in rest]
            )
            parts.append(f'<path d="{data}" stroke="black" stroke-width="2" fill="none"/>\n')

    for node_index, node in enumerate(result.nodes):
        for port_index, port in enumerate(node.ports):
            if show_all_ports or (node_index, port_index) in used_ports:
                parts.append(
                    f'<rect x="{_fmt(node.position.x + port.position.x)}" '
                    f'y="{_fmt(node.position.y + port.position.y)}" '
                    f'width="{_fmt(port.size.width)}" height="{_fmt(port.size.height)}" '
                    f'fill="{_PORT_FILLS[port.port_type]}" stroke="black"/>\n'
                )

    parts.append("</svg>")
    return "".join(parts)


def generate_svg_with_obstacles(
    result: LayoutResult,
    filename: Union[str, os.PathLike],
    show_grid: bool = False,
    show_all_ports: bool = False,
    grid: Optional[Grid] = None,
) -> None:
    """Write the SVG of a layout result, with blocked grid cells, to a file."""
    Path(filename).write_text(
        render_svg(result, show_grid, show_all_ports, grid), encoding="utf-8"
    )


def generate_svg(
    result: LayoutResult,
    filename: Union[str, os.PathLike],
    show_grid: bool = False,
    show_all_ports: bool = False,
) -> None:
    """Write the SVG of a layout result to a file."""
    generate_svg_with_obstacles(result, filename, show_grid, show_all_ports, None)