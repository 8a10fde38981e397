# archviz

archviz lays out architecture diagrams. You describe three things:

- boxes (nodes),
- the small connector boxes on their sides (ports),
- the connections between nodes (edges).

The layout then works in four steps:

1. It groups connected nodes and places the groups on a grid with three
   columns.
2. It refines the positions with a force-directed pass. If boxes still
   overlap after that, a second pass runs that refuses any move which would
   create an overlap.
3. It routes every edge along an orthogonal, shortest path on a grid of
   5-unit cells. The grid avoids node bodies and port areas.
4. It sizes a canvas to fit the result and centres everything on it.

The result can be written out as an SVG file. The package uses only the
standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```python
from archviz.types import Node, Port, PortType, Position, Size
from archviz.engine import ArchVizLayout
from archviz.svg import generate_svg

def box(name, width, height):
    return Node(
        id=name,
        size=Size(width, height),
        position=Position(0.0, 0.0),
        ports=[
            Port(Position(-10.0, height / 2 - 5), Size(10.0, 10.0), PortType.INPUT),
            Port(Position(width, height / 2 - 5), Size(10.0, 10.0), PortType.OUTPUT),
        ],
    )

nodes = [box("Gateway", 150, 100), box("Display", 90, 70), box("Battery", 60, 50)]

# An edge is (source index, target index[, source port id[, target port id]]).
edges = [(0, 1, None, None), (0, 2)]

layout = ArchVizLayout(min_spacing=120.0)
result = layout.layout(nodes, edges)

for node in result.nodes:
    print(node.id, node.position)
for edge in result.edges:
    print(edge.source, "->", edge.target, len(edge.path), "points")

generate_svg(result, "diagram.svg", show_grid=False, show_all_ports=False)
```

`ArchVizLayout.layout` returns a `LayoutResult`. It holds positioned copies of
the nodes, the routed `Edge`s, `canvas_width`, `canvas_height` and the routing
`grid`. The nodes you pass in are not changed.

### Edges and ports

Each edge is a tuple of two to four values. Any other length raises
`ValueError`. How the ports are chosen:

- With a port id of `None`, or no port id at all, the router picks the port
  whose direction from the node centre best faces the other node.
- If the node has no ports, or none of them faces the other node, the edge
  ends at the node centre, snapped to a 10-unit raster. The port index is
  then reported as 0.
- A port id binds an edge end to a port. The first time an id is seen on a
  node, it is given to the free port (one whose `id` is `None`) nearest to
  the other node's centre. Later edges with the same id reuse that port.
- Edges from a node to itself are skipped and get no route.

Each routed `Edge` records the port indices it used in `source_port` and
`target_port`, and its waypoints in `path`.

### Layout settings

`ArchVizLayout` has these settings:

| Setting               | Default  |
|-----------------------|----------|
| `iterations`          | `100`    |
| `repulsion_strength`  | `1000.0` |
| `attraction_strength` | `0.1`    |
| `initial_spacing`     | `100.0`  |
| `min_spacing`         | `20.0`   |
| `allow_diagonals`     | `True`   |
| `spaced_edges`        | `False`  |

- The layout never uses a `min_spacing` below 15 units. That much space is
  kept free between nodes so that edges can be routed between them.
- `allow_diagonals` and `spaced_edges` are stored but do not change the
  result. Routes are always orthogonal.

### Routing only

`ArchVizLayout.route_edges_only(nodes, edges)` leaves the nodes where they are
and returns only the routed edges. The nodes you pass in are not changed.

The lower-level pieces can also be used directly:

- `archviz.routing.route_edges(nodes, edges)` returns the edges together with
  the `archviz.grid.Grid`. It may assign port ids on the given nodes.
- `archviz.placement` holds `initial_placement`, `force_directed`,
  `has_overlaps`, `find_overlaps` and `effective_geometry`.
- `archviz.engine` holds `calculate_canvas_size` and `center_layout`.

### Laying out your own objects

`ArchVizLayout.layout_in_place(nodes, edges)` and
`archviz.engine.layout_in_place(nodes, edges, config)` work on your own
objects instead of archviz's `Node` and `Edge` types. They write the new
node positions and edge paths back into those objects.

Your objects must satisfy these protocols:

- Node objects satisfy `archviz.types.LayoutNode`. They need `id`,
  `position`, `size` and `ports`.
- Edge objects satisfy `archviz.types.LayoutEdge`. They need `source`,
  `target`, `source_port`, `target_port` and `path`.

Paths are written back by position in the list of routed edges. If there are
self-loops, which are skipped, later paths shift onto earlier edge objects.

If the layout produces more nodes or edges than were given, these functions
raise an error:

- `archviz.types.InvalidNodeIndex` for extra nodes.
- `archviz.types.InvalidEdgeIndex` for extra edges.

Both are subclasses of `LayoutError`.

### SVG output

These functions write an SVG file:

- `generate_svg(result, filename, show_grid, show_all_ports)`
- `generate_svg_with_obstacles(result, filename, show_grid, show_all_ports, grid)`

`generate_svg_with_obstacles` also draws the blocked routing cells as
translucent red squares. For the grid, pass `result.grid`.

`render_svg(result, show_grid, show_all_ports, grid)` returns the SVG document
as a string and writes nothing.

How things are drawn:

- `show_grid` adds light grey lines every 5 units.
- A node is filled with the value of its `"color"` attribute if it has one.
  Otherwise it is light blue.
- Node labels are not escaped.
- Input ports are light blue and output ports are light coral.
- Only ports that an edge uses are drawn, unless `show_all_ports` is set.

### Logging

Overlap checks and diagonal route segments are reported at `DEBUG` level on
the `archviz.engine` and `archviz.routing` loggers.

## What it does not do

archviz is a library only:

- It has no command-line tool and no interactive viewer.
- It does not read diagrams from any file format. You build `Node` objects
  and edge tuples in Python.
- Its only output is SVG.