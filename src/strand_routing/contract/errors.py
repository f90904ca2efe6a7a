"""
Routing Errors
==============

Every hard failure of a routing attempt is a RoutingError. It subclasses
ValueError so fail-fast callers that already catch ValueError keep working.

Budget exhaustion in the heuristic searches is NOT an error: those return
their best result instead.
"""


class RoutingError(ValueError):
    """Base class for failures of a single routing attempt."""


class InsufficientFaceInformation(RoutingError):
    """Face data is missing or too sparse for topological ordering."""


class NonManifoldError(RoutingError):
    """An edge has more than two incident faces."""


class EulerizationError(RoutingError):
    """Odd-degree vertices could not be paired up."""


class ATrailNotFound(RoutingError):
    """No non-crossing Euler circuit was found within the search budget."""


class TrailError(RoutingError):
    """A produced or replayed trail is inconsistent with its graph."""


class DisconnectedGraphError(RoutingError):
    """The graph has no edges or more than one component; no spanning tree exists."""
