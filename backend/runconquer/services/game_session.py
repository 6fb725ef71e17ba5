import logging
from datetime import datetime
from typing import Callable, Optional

from runconquer.core.config import settings
from runconquer.core.time_utils import local_date, utcnow
from runconquer.game.engine import finish_run
from runconquer.schemas.game import FinishedRun, GameState, RunOutcome

logger = logging.getLogger(__name__)


class GameSession:
    """In-memory view of one user's game state.

    `persist` must durably write an outcome or raise. The held state only
    advances after it returns, so a failed write leaves the session exactly
    where it was and the exception reaches the caller.
    """

    def __init__(
        self,
        state: GameState,
        persist: Callable[[RunOutcome], None],
        tz_name: Optional[str] = None,
    ):
        self._state = state
        self._persist = persist
        self._tz_name = tz_name or settings.timezone

    @property
    def state(self) -> GameState:
        return self._state

    def finish_run(self, finished: FinishedRun, now: Optional[datetime] = None) -> RunOutcome:
        now = now or utcnow()
        today = local_date(finished.end_time, self._tz_name)
        outcome = finish_run(self._state, finished, now=now, today=today)
        self._persist(outcome)
        self._state = outcome.state
        for a in outcome.unlocked:
            logger.info("User %s unlocked %s", outcome.state.profile.id, a.title)
        return outcome
