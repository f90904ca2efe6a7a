"""Route types and the five routing strategies."""

from .route import (
    Route,
    validate_single_cover,
    validate_double_cover,
)
from .atrail import ATrailParameters, find_atrail, from_vertex_sequence
from .euler import find_euler_route
from .sterna import SternaParameters, find_sterna_route, kissing_loop_cost
from .xtrna import XtrnaParameters, find_xtrna_route, embedding_genus, kissing_loop_count
from .cycle_cover import CycleCover, CycleCoverParameters, find_cycle_cover, validate_cycle_cover
from .dispatch import ROUTERS, find_route, route_to_json, route_from_json
