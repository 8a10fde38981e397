"""Force-directed placement, orthogonal edge routing and SVG output for architecture diagrams."""

__version__ = "0.1.0"