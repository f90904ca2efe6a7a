"""
Global constants for strand_routing
===================================

All tolerances, search budgets and magic numbers in ONE place.
"""

# Numerical tolerances
EPS_ZERO = 1e-12       # For "is this zero?" (normals, lengths)
EPS_CLOSE = 1e-10      # For "are these equal?"

# Default random seed (for reproducibility)
DEFAULT_SEED = 42

# =============================================================================
# SEARCH BUDGETS
# =============================================================================
#
# Every exponential or heuristic search takes an explicit budget. These are
# the defaults; each router accepts an override through its parameters.

MAX_ITERATIONS = 10**6         # A-trail transition search (stack steps)
KL_MAX_ITERATIONS = 200_000    # Kissing-loop branch-and-bound (state expansions)
KL_SHUFFLE_INTERVAL = 5000     # Shuffle the branch-and-bound stack every N steps
XTRNA_MAX_TRIES = 2000         # Random spanning trees sampled by the XT router
XTRNA_EARLY_STOP = (0, 2)      # Kissing-loop half-edge counts that end resampling early
WALK_GUARD = 10000             # Rotation-system face walks longer than this are a bug

# Eulerization tie-break noise: cost = max_d - d + U(0, 1) * TIE_BREAK_SCALE
TIE_BREAK_SCALE = 1e-4

# =============================================================================
# TRANSITIONS (A-trail)
# =============================================================================
#
# For a vertex of degree d > 4 with topological half-edge order n[0..d-1]:
#   LEFT  pairs n[i] with n[i + (-1)^(i % 2)]       -> (0,1) (2,3) ...
#   RIGHT pairs n[i] with n[i + (-1)^((i+1) % 2)]   -> (1,2) (3,4) ... (d-1,0)
#   NONE  allows every incident half-edge
# Degree <= 4 vertices are always NONE; crossings there are removed afterwards.

TRANSITION_NONE = 0
TRANSITION_LEFT = 1
TRANSITION_RIGHT = 2

# =============================================================================
# SPANNING TREES (ST router)
# =============================================================================

TREE_MINIMUM = "minimum"   # Minimum spanning tree by edge length
TREE_BFS = "bfs"           # Breadth-first tree from the max-degree vertex
TREE_RANDOM = "random"     # Random spanning tree
TREE_DFS = "dfs"           # Depth-first tree
TREE_KINDS = (TREE_MINIMUM, TREE_BFS, TREE_RANDOM, TREE_DFS)

# Co-tree stub placement relative to the tree edges around a vertex
ORDER_ROTATION = "rotation"  # Follow the rotation around the vertex
ORDER_PRE = "pre"            # Co-tree stubs before tree descents
ORDER_POST = "post"          # Co-tree stubs after tree descents
CO_TREE_ORDERS = (ORDER_ROTATION, ORDER_PRE, ORDER_POST)

# =============================================================================
# CYCLE COVER
# =============================================================================

GENUS_ANY = "any"   # Topological rotations: the mesh faces themselves
GENUS_MAX = "max"   # Spanning-tree rotations with kissing-loop stubs: few long cycles
GENUS_TARGETS = (GENUS_ANY, GENUS_MAX)

# Route strategy names (persisted in JSON)
STRATEGY_ATRAIL = "atrail"
STRATEGY_EULER = "euler"
STRATEGY_STERNA = "sterna"
STRATEGY_XTRNA = "xtrna"
STRATEGY_CYCLE_COVER = "cycle_cover"
