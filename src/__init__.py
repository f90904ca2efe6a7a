"""
Strand Routing Source Code
==========================

Modules:
    strand_routing - Mesh graph model and strand routers
    tests          - Test suite

Requirements:
    Python >= 3.9
    numpy >= 1.20
    scipy >= 1.11
    networkx >= 2.6
"""

import sys

# Python version check
if sys.version_info < (3, 9):
    raise ImportError(f"strand_routing requires Python >= 3.9, got {sys.version}")

# scipy version check (csgraph dijkstra predecessors, csr_matrix input)
import scipy
_scipy_version = tuple(int(p) for p in scipy.__version__.split('.')[:2] if p.isdigit())
if _scipy_version < (1, 11):
    raise ImportError(f"strand_routing requires scipy >= 1.11, got {scipy.__version__}")

# numpy version check (np.random.Generator)
import numpy as np
_numpy_version = tuple(int(p) for p in np.__version__.split('.')[:2] if p.isdigit())
if _numpy_version < (1, 20):
    raise ImportError(f"strand_routing requires numpy >= 1.20, got {np.__version__}")

# networkx version check (max_weight_matching with maxcardinality)
import networkx as nx
_networkx_version = tuple(int(p) for p in nx.__version__.split('.')[:2] if p.isdigit())
if _networkx_version < (2, 6):
    raise ImportError(f"strand_routing requires networkx >= 2.6, got {nx.__version__}")
