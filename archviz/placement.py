"""Node placement: initial clustering and force-directed refinement."""

from __future__ import annotations

import math
from itertools import combinations
from typing import Iterable, Sequence

from archviz.types import Node, Position, Size

Bounds = tuple[float, float, float, float]
EdgeSpec = Sequence

_CLUSTERS_PER_ROW = 3
_CLUSTER_SPACING_FACTOR = 5.0
_STEP = 0.1


def effective_geometry(nodes: Iterable[Node]) -> tuple[list[Bounds], list[Size]]:
    """Effective bounds and effective sizes (ports included) of every node."""
    bounds = [node.effective_bounds() for node in nodes]
    sizes = [Size(max_x - min_x, max_y - min_y) for min_x, max_x, min_y, max_y in bounds]
    return bounds, sizes


def _boxes_overlap(
    pos_a: Position, bounds_a: Bounds, pos_b: Position, bounds_b: Bounds
) -> bool:
    """Whether two effective bounding boxes, placed at the given positions, overlap."""
    min_xa, max_xa, min_ya, max_ya = bounds_a
    min_xb, max_xb, min_yb, max_yb = bounds_b
    overlap_x = pos_a.x + min_xa < pos_b.x + max_xb and pos_a.x + max_xa > pos_b.x + min_xb
    overlap_y = pos_a.y + min_ya < pos_b.y + max_yb and pos_a.y + max_ya > pos_b.y + min_yb
    return overlap_x and overlap_y


def _clusters(node_count: int, edges: Sequence[EdgeSpec]) -> list[list[int]]:
    """Group each unassigned node with its unassigned direct neighbours."""
    assigned = [False] * node_count
    clusters = []
    for i in range(node_count):
        if assigned[i]:
            continue
        cluster = [i]
        assigned[i] = True
        for a, b, *_ in edges:
            if a == i and not assigned[b]:
                cluster.append(b)
                assigned[b] = True
            elif b == i and not assigned[a]:
                cluster.append(a)
                assigned[a] = True
        clusters.append(cluster)
    return clusters


def initial_placement(
    nodes: Sequence[Node],
    edges: Sequence[EdgeSpec],
    initial_spacing: float,
    min_spacing: float,
) -> None:
    """Place connected clusters on a three-column grid, stacking each cluster vertically."""
    cluster_spacing = initial_spacing * _CLUSTER_SPACING_FACTOR
    for index, cluster in enumerate(_clusters(len(nodes), edges)):
        row, col = divmod(index, _CLUSTERS_PER_ROW)
        cluster_x = col * cluster_spacing
        y_offset = row * cluster_spacing
        for node_index in cluster:
            node = nodes[node_index]
            node.position = Position(cluster_x, y_offset)
            y_offset += node.size.height + min_spacing


def force_directed(
    nodes: Sequence[Node],
    edges: Sequence[EdgeSpec],
    spacing: float,
    prevent_overlaps: bool,
    effective_sizes: Sequence[Size],
    effective_bounds: Sequence[Bounds],
    iterations: int,
    repulsion_strength: float,
    attraction_strength: float,
) -> None:
    """Refine node positions with pairwise repulsion and edge attraction.

    With ``prevent_overlaps`` a node only moves when its new effective box
    overlaps no other node's.
    """
    count = len(nodes)
    for _ in range(iterations):
        fx = [0.0] * count
        fy = [0.0] * count

        for i, j in combinations(range(count), 2):
            size_i, size_j = effective_sizes[i], effective_sizes[j]
            pos_i, pos_j = nodes[i].position, nodes[j].position
            dx = (pos_j.x + size_j.width / 2.0) - (pos_i.x + size_i.width / 2.0)
            dy = (pos_j.y + size_j.height / 2.0) - (pos_i.y + size_i.height / 2.0)
            min_dist = max(
                (size_i.width + size_j.width) / 2.0 + spacing,
                (size_i.height + size_j.height) / 2.0 + spacing,
            )
            dist = math.hypot(dx, dy)
            if dist < min_dist:
                force = repulsion_strength * (min_dist - dist) / min_dist
                push_x = force * dx / max(dist, 1.0)
                push_y = force * dy / max(dist, 1.0)
                fx[i] -= push_x
                fy[i] -= push_y
                fx[j] += push_x
                fy[j] += push_y

        for a, b, *_ in edges:
            dx = nodes[b].position.x - nodes[a].position.x
            dy = nodes[b].position.y - nodes[a].position.y
            dist = max(math.hypot(dx, dy), 1.0)
            force = attraction_strength * dist
            pull_x = force * dx / dist
            pull_y = force * dy / dist
            fx[a] += pull_x
            fy[a] += pull_y
            fx[b] -= pull_x
            fy[b] -= pull_y

        for i, node in enumerate(nodes):
            moved = Position(node.position.x + fx[i] * _STEP, node.position.y + fy[i] * _STEP)
            if prevent_overlaps and any(
                _boxes_overlap(moved, effective_bounds[i], other.position, effective_bounds[j])
                for j, other in enumerate(nodes)
                if j != i
            ):
                continue
            node.position = moved


def find_overlaps(
    nodes: Sequence[Node], effective_bounds: Sequence[Bounds]
) -> list[tuple[int, int]]:
    """Index pairs (i, j), i < j, of nodes whose effective boxes overlap."""
    return [
        (i, j)
        for i, j in combinations(range(len(nodes)), 2)
        if _boxes_overlap(
            nodes[i].position, effective_bounds[i], nodes[j].position, effective_bounds[j]
        )
    ]


def has_overlaps(nodes: Sequence[Node], effective_bounds: Sequence[Bounds]) -> bool:
    """Whether any two nodes' effective boxes overlap."""
    return any(
        _boxes_overlap(
            nodes[i].position, effective_bounds[i], nodes[j].position, effective_bounds[j]
        )
        for i, j in combinations(range(len(nodes)), 2)
    )