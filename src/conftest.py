"""
Shared pytest setup for strand_routing.

Puts src/ on sys.path so the package imports without installation, and
provides fresh graphs and a seeded generator to the router tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

src_root = Path(__file__).parent
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from strand_routing.builders import (  # noqa: E402
    build_tetrahedron, build_octahedron, build_quad_grid, graph_from_builder,
)
from strand_routing.contract import DEFAULT_SEED  # noqa: E402


@pytest.fixture
def rng():
    return np.random.default_rng(DEFAULT_SEED)


# Routers and split_edge mutate graphs; every test gets its own copy
@pytest.fixture
def tetra():
    return graph_from_builder(build_tetrahedron)


@pytest.fixture
def octa():
    return graph_from_builder(build_octahedron)


@pytest.fixture
def quad_grid():
    return graph_from_builder(build_quad_grid, 4)
