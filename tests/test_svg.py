import pytest

from archviz.engine import ArchVizLayout
from archviz.grid import Grid
from archviz.svg import generate_svg, generate_svg_with_obstacles, render_svg
from archviz.types import Edge, LayoutResult, Node, Port, PortType, Position, Size

I = PortType.INPUT
O = PortType.OUTPUT

HEADER = (
    '<svg width="440" height="340" xmlns="http://www.w3.org/2000/svg">\n'
    '<rect width="100%" height="100%" fill="white"/>\n'
)


def _port(x, y, kind):
    return Port(position=Position(x, y), size=Size(10, 10), port_type=kind)


def _four_port_node(name, w, h):
    return Node(
        id=name,
        size=Size(w, h),
        ports=[
            _port(-10, (h - 10) / 2, I),
            _port(w, (h - 10) / 2, O),
            _port((w - 10) / 2, -10, I),
            _port((w - 10) / 2, h, O),
        ],
    )


def _single_node_result(edges=()):
    node = Node(
        id="A",
        size=Size(100, 50),
        position=Position(10, 20),
        ports=[_port(-10, 20, I)],
        attributes=[("color", "grey")],
    )
    return LayoutResult(nodes=[node], edges=list(edges), canvas_width=440, canvas_height=340)


@pytest.fixture
def set_1_result():
    nodes = [
        _four_port_node("ECU1", 120, 80),
        _four_port_node("ECU2", 100, 60),
        _four_port_node("Sensor", 80, 40),
    ]
    edges = [(0, 1, None, None), (1, 2, None, None), (0, 2, None, None)]
    return ArchVizLayout(min_spacing=120.0).layout(nodes, edges)


def test_render_single_node_exact():
    expected = (
        HEADER
        + '<rect x="10" y="20" width="100" height="50" fill="grey" stroke="black"/>\n'
        + '<text x="60" y="50" font-family="Arial" font-size="12" '
        'text-anchor="middle">A</text>\n'
        + "</svg>"
    )
    assert render_svg(_single_node_result()) == expected


def test_default_node_fill():
    result = _single_node_result()
    result.nodes[0].attributes = []
    assert 'fill="lightblue" stroke="black"/>\n<text' in render_svg(result)


def test_edge_path_and_used_port():
    edge = Edge(0, 0, source_port=0, target_port=None,
                path=[Position(0, 0), Position(10, 0), Position(10, 12.5)])
    svg = render_svg(_single_node_result([edge]))
    assert '<path d="M 0 0 L 10 0 L 10 12.5" stroke="black" stroke-width="2" fill="none"/>\n' in svg
    assert '<rect x="0" y="40" width="10" height="10" fill="lightblue" stroke="black"/>\n' in svg


def test_short_path_is_not_drawn():
    edge = Edge(0, 0, path=[Position(0, 0)])
    assert "<path" not in render_svg(_single_node_result([edge]))


def test_unused_ports_hidden_unless_requested():
    result = _single_node_result()
    assert render_svg(result).count("<rect") == 2
    assert render_svg(result, show_all_ports=True).count("<rect") == 3


def test_grid_lines():
    result = LayoutResult(nodes=[], edges=[], canvas_width=10, canvas_height=10)
    svg = render_svg(result, show_grid=True)
    assert svg.count("<line") == 6
    assert '<line x1="5" y1="0" x2="5" y2="10" stroke="lightgray" stroke-width="0.5"/>' in svg


def test_obstacles_drawn():
    result = LayoutResult(nodes=[], edges=[], canvas_width=10, canvas_height=10)
    grid = Grid(cell_size=5.0, origin_x=0.0, origin_y=0.0, width=2, height=1,
                obstacles=[[True, False]])
    svg = render_svg(result, grid=grid)
    assert svg.count('fill="red"') == 1
    assert '<rect x="0" y="0" width="5" height="5" fill="red"' in svg


def test_generate_svg_set_1(tmp_path, set_1_result):
    target = tmp_path / "test_set_1.svg"
    generate_svg(set_1_result, target, True, True)
    text = target.read_text(encoding="utf-8")
    assert text.startswith("<svg width=")
    assert text.endswith("</svg>")
    for name in ("ECU1", "ECU2", "Sensor"):
        assert f">{name}</text>" in text
    assert text.count('fill="lightcoral"') == 6
    assert text.count("<path") == 3


def test_generate_svg_with_obstacles_matches_render(tmp_path, set_1_result):
    target = tmp_path / "test_set_6.svg"
    generate_svg_with_obstacles(set_1_result, target, False, False, set_1_result.grid)
    text = target.read_text(encoding="utf-8")
    assert text == render_svg(set_1_result, False, False, set_1_result.grid)
    assert 'fill="red"' in text


def test_generate_svg_to_missing_directory_fails(tmp_path):
    with pytest.raises(OSError):
        generate_svg(_single_node_result(), tmp_path / "missing" / "out.svg")