"""
Contract: constants and error taxonomy shared by every layer.
"""

from .constants import *
from .errors import (
    RoutingError,
    InsufficientFaceInformation,
    NonManifoldError,
    EulerizationError,
    ATrailNotFound,
    TrailError,
    DisconnectedGraphError,
)
