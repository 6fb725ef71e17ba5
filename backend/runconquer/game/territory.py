import logging
import math
from datetime import datetime
from typing import Optional

from runconquer.core.constants import (
    MAX_TERRITORY_RADIUS_M,
    TERRITORY_GAIN_STEP_M,
    TERRITORY_RADIUS_DIVISOR,
)
from runconquer.schemas.game import RunRecord, Territory

logger = logging.getLogger(__name__)


def territory_radius(distance: float) -> float:
    """Claim radius in meters, capped so very long runs stay bounded."""
    return min(distance / TERRITORY_RADIUS_DIVISOR, MAX_TERRITORY_RADIUS_M)


def territory_gained(distance: float) -> int:
    return math.floor(distance / TERRITORY_GAIN_STEP_M)


def claim_territory(
    run: RunRecord,
    *,
    territory_id: str,
    user_id: str,
    color: str,
    now: datetime,
) -> Optional[Territory]:
    """Circular zone centred on the middle of the run's path.

    Overlapping claims are kept as-is; there is no merge step.
    """
    if not run.path:
        return None

    center = run.path[len(run.path) // 2]
    territory = Territory(
        id=territory_id,
        user_id=user_id,
        center=center,
        radius=territory_radius(run.distance),
        color=color,
        distance=run.distance,
        captured_at=now,
    )
    logger.info(
        "Claimed territory %s for user %s: r=%.0f m at (%.5f, %.5f)",
        territory.id, user_id, territory.radius, center.latitude, center.longitude,
    )
    return territory
