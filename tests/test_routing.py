import pytest

from archviz.grid import Grid, nearest_grid
from archviz.routing import (
    Side,
    extension_distance,
    port_side,
    route_edges,
    select_port,
)
from archviz.types import Node, Port, PortType, Position, Size


def _port(x, y, port_type=PortType.INPUT, w=50.0, h=50.0, port_id=None):
    return Port(Position(x, y), Size(w, h), port_type, port_id)


def create_test_nodes():
    return [
        Node(
            id="A",
            size=Size(100.0, 50.0),
            position=Position(0.0, 0.0),
            ports=[
                _port(0.0, 25.0, PortType.INPUT),
                _port(100.0, 25.0, PortType.OUTPUT),
                _port(50.0, 0.0, PortType.INPUT),
                _port(50.0, 50.0, PortType.OUTPUT),
            ],
        ),
        Node(
            id="B",
            size=Size(80.0, 60.0),
            position=Position(0.0, 0.0),
            ports=[
                _port(0.0, 30.0, PortType.INPUT),
                _port(80.0, 30.0, PortType.OUTPUT),
                _port(40.0, 0.0, PortType.INPUT),
                _port(40.0, 60.0, PortType.OUTPUT),
            ],
        ),
    ]


def _side_ported(node_id, x, ids=(None, None)):
    return Node(
        id=node_id,
        size=Size(100.0, 50.0),
        position=Position(x, 0.0),
        ports=[
            _port(-10.0, 20.0, PortType.INPUT, 10.0, 10.0, ids[0]),
            _port(100.0, 20.0, PortType.OUTPUT, 10.0, 10.0, ids[1]),
        ],
    )


def _small_grid(rows):
    return Grid(
        cell_size=5.0,
        origin_x=0.0,
        origin_y=0.0,
        width=len(rows[0]),
        height=len(rows),
        obstacles=[list(row) for row in rows],
    )


def test_route_edges_from_source_cases():
    nodes = create_test_nodes()
    routed, _ = route_edges(nodes, [(0, 1, None, None)])
    assert len(routed) == 1
    assert routed[0].source == 0
    assert routed[0].target == 1
    assert len(routed[0].path) >= 2


def test_route_edges_skips_self_loops():
    nodes = create_test_nodes()
    routed, _ = route_edges(nodes, [(0, 0, None, None)])
    assert routed == []


def test_route_edges_returns_routing_grid():
    nodes = create_test_nodes()
    _, grid = route_edges(nodes, [(0, 1, None, None)])
    assert grid.cell_size == 5.0
    assert grid.origin_x == -50.0
    assert grid.origin_y == -50.0


def test_route_edges_endpoints_snap_to_facing_ports():
    nodes = [_side_ported("A", 0.0), _side_ported("B", 300.0)]
    routed, _ = route_edges(nodes, [(0, 1, None, None)])
    edge = routed[0]
    assert edge.source_port == 1
    assert edge.target_port == 0
    assert edge.path[0] == Position(105.0, 25.0)
    assert edge.path[-1] == Position(295.0, 25.0)


def test_route_edges_assigns_port_ids():
    nodes = [_side_ported("A", 0.0), _side_ported("B", 300.0)]
    routed, _ = route_edges(nodes, [(0, 1, 7, 8)])
    edge = routed[0]
    assert nodes[0].ports[edge.source_port].id == 7
    assert nodes[1].ports[edge.target_port].id == 8
    assert edge.source_port == 1
    assert edge.target_port == 0


def test_route_edges_reuses_assigned_port_id():
    nodes = [_side_ported("A", 0.0, ids=(None, 3)), _side_ported("B", 300.0)]
    routed, _ = route_edges(nodes, [(0, 1, 3, None)])
    assert routed[0].source_port == 1
    assert nodes[0].ports[1].id == 3
    assert nodes[0].ports[0].id is None


def test_route_edges_falls_back_when_no_port_is_free():
    nodes = [_side_ported("A", 0.0, ids=(1, 2)), _side_ported("B", 300.0)]
    routed, _ = route_edges(nodes, [(0, 1, 9, None)])
    assert routed[0].source_port == 1
    assert [p.id for p in nodes[0].ports] == [1, 2]


@pytest.mark.parametrize(
    "pos, expected",
    [
        (Position(3.0, 25.0), Side.LEFT),
        (Position(105.0, 25.0), Side.RIGHT),
        (Position(50.0, -5.0), Side.TOP),
        (Position(50.0, 55.0), Side.BOTTOM),
    ],
)
def test_port_side(pos, expected):
    node = Node(id="n", size=Size(100.0, 50.0), position=Position(0.0, 0.0))
    assert port_side(pos, node) is expected


def test_extension_distance_horizontal():
    grid = _small_grid(
        [
            [True, True, True, True, True],
            [False, True, True, False, False],
            [True, True, True, True, True],
        ]
    )
    assert extension_distance(grid, 1, 1, Side.RIGHT, 5.0) == 10.0
    assert extension_distance(grid, 2, 1, Side.LEFT, 5.0) == 10.0


def test_extension_distance_vertical():
    grid = _small_grid(
        [
            [True, False, True],
            [True, True, True],
            [True, True, True],
            [True, False, True],
        ]
    )
    assert extension_distance(grid, 1, 1, Side.TOP, 5.0) == 5.0
    assert extension_distance(grid, 1, 1, Side.BOTTOM, 5.0) == 10.0


def test_extension_distance_fallback_when_blocked():
    grid = _small_grid([[True, True, True], [True, True, True]])
    assert extension_distance(grid, 1, 0, Side.RIGHT, 5.0) == 25.0
    assert extension_distance(grid, 0, 0, Side.LEFT, 5.0) == 25.0


def test_select_port_without_ports_snaps_center():
    from_node = Node(id="a", size=Size(100.0, 50.0), position=Position(0.0, 0.0))
    to_node = Node(id="b", size=Size(100.0, 50.0), position=Position(300.0, 0.0))
    pos, index = select_port(from_node, to_node)
    assert index is None
    assert pos == Position(50.0, 30.0)


def test_select_port_picks_facing_port():
    from_node = _side_ported("a", 0.0)
    to_node = _side_ported("b", 300.0)
    pos, index = select_port(from_node, to_node)
    assert index == 1
    assert pos == Position(105.0, 25.0)

    pos, index = select_port(to_node, from_node)
    assert index == 0
    assert pos == Position(295.0, 25.0)


def test_select_port_coincident_centers_falls_back():
    from_node = _side_ported("a", 0.0)
    to_node = _side_ported("b", 0.0)
    pos, index = select_port(from_node, to_node)
    assert index is None
    assert pos == Position(50.0, 30.0)


def test_path_start_matches_snapped_port():
    nodes = create_test_nodes()
    nodes[1].position = Position(400.0, 200.0)
    routed, grid = route_edges(nodes, [(0, 1, None, None)])
    edge = routed[0]
    source_pos, _ = select_port(nodes[0], nodes[1])
    assert edge.path[0] == nearest_grid(source_pos, -50.0, -50.0, 5.0)
    assert grid.origin_x == -50.0