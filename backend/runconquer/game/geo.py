"""Turn a noisy stream of location fixes into a trusted path and distance.

Every function here is pure: `apply_fix` takes the previous filter state
and a new fix and returns the next state, so it can be called from any
callback without blocking.
"""

import logging
import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from runconquer.core.constants import (
    EARTH_RADIUS_M,
    MAX_RUNNING_SPEED_MPS,
    MAX_SEGMENT_M,
    MIN_SEGMENT_M,
)
from runconquer.schemas.game import Coordinate, LocationFix

logger = logging.getLogger(__name__)


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return great-circle distance in meters between two WGS84 points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_between(a: Coordinate, b: Coordinate) -> float:
    return haversine(a.latitude, a.longitude, b.latitude, b.longitude)


def reported_speed(fix: LocationFix) -> float:
    """Sensor speed in m/s; missing or negative (invalid) readings count as 0."""
    if fix.speed is None or fix.speed < 0:
        return 0.0
    return fix.speed


class FixVerdict(str, Enum):
    seeded = "seeded"  # first accepted fix of the run, path starts here
    credited = "credited"  # distance added and path extended
    too_fast = "too_fast"
    out_of_range = "out_of_range"  # jitter or teleport

    @property
    def accepted(self) -> bool:
        return self in (FixVerdict.seeded, FixVerdict.credited)


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    last_fix: Optional[Coordinate] = None
    path: tuple[Coordinate, ...] = ()
    distance: float = 0.0


def apply_fix(state: FilterState, fix: LocationFix) -> tuple[FilterState, FixVerdict]:
    """Fold one fix into the filter state.

    Rejected fixes return `state` itself, untouched: path, distance and
    the last-fix pointer only move for accepted fixes.
    """
    if reported_speed(fix) > MAX_RUNNING_SPEED_MPS:
        logger.debug("Dropping fix at %s: speed %.1f m/s", fix.timestamp, fix.speed)
        return state, FixVerdict.too_fast

    coord = fix.coordinate
    if state.last_fix is None:
        seeded = state.model_copy(update={"last_fix": coord, "path": state.path + (coord,)})
        return seeded, FixVerdict.seeded

    d = distance_between(state.last_fix, coord)
    if MIN_SEGMENT_M < d < MAX_SEGMENT_M:
        credited = state.model_copy(
            update={
                "last_fix": coord,
                "path": state.path + (coord,),
                "distance": state.distance + d,
            }
        )
        return credited, FixVerdict.credited

    logger.debug("Dropping fix at %s: %.1f m from last accepted fix", fix.timestamp, d)
    return state, FixVerdict.out_of_range


def filter_fixes(fixes, state: Optional[FilterState] = None) -> FilterState:
    """Run a whole sequence of fixes through `apply_fix`."""
    state = state or FilterState()
    for fix in fixes:
        state, _ = apply_fix(state, fix)
    return state
