"""
STRAND_ROUTING - Strand routes over polyhedral mesh graphs
==========================================================

Routes a single closed strand over every edge of a mesh graph, the
layout step of wireframe DNA/RNA design.

Structure:
    contract/   - Constants, budgets and the error taxonomy
    graph/      - Half-edge graph, rotation orders, normals, augmentation
    operators/  - Shortest paths, matching, spanning trees
    builders/   - Test meshes and mesh -> Graph construction
    routing/    - Route and CycleCover types and the five routers

Routers:
    find_atrail         - single cover, non-crossing (A-trail)
    find_euler_route    - single cover over a checkerboarded mesh
    find_sterna_route   - double cover around a spanning tree
    find_xtrna_route    - double cover along a one-face rotation system
    find_cycle_cover    - every edge twice as the faces of a rotation system

Every router works on a clone and returns a result that owns its graph:
a Route (one closed walk) or, for the cycle cover, a CycleCover.

Oct 2026
"""

import logging

from . import contract
from . import graph
from . import operators
from . import builders
from . import routing

from .graph import Graph
from .routing import (
    Route,
    CycleCover,
    find_atrail,
    find_euler_route,
    find_sterna_route,
    find_xtrna_route,
    find_cycle_cover,
)
from .logging_config import setup_logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
