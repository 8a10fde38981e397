[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "archviz"
version = "0.1.0"
description = "Force-directed placement and orthogonal edge routing for architecture diagrams, with SVG output"
requires-python = ">=3.10"
dependencies = []
keywords = ["graph", "layout", "diagram", "edge-routing", "svg", "force-directed"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["archviz"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
