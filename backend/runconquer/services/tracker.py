"""Drive a RunSession from a live location source and a 1 Hz ticker."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, Protocol

from runconquer.core.errors import InvalidRunTransition, LocationPermissionDenied
from runconquer.core.time_utils import utcnow
from runconquer.game.session import RunSession, RunStatus
from runconquer.schemas.game import FinishedRun, LocationFix

logger = logging.getLogger(__name__)


class Subscription(Protocol):
    def remove(self) -> None: ...


class LocationSource(Protocol):
    """Device GPS (or anything pushing fixes at its own cadence)."""

    async def request_permission(self) -> bool: ...

    def subscribe(self, callback: Callable[[LocationFix], None]) -> Subscription: ...


class RunTracker:
    """Calling `start()` after `stop()` begins a new run in a fresh session."""

    def __init__(
        self,
        source: LocationSource,
        *,
        tick_interval: float = 1.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._source = source
        self._tick_interval = tick_interval
        self._clock = clock
        self._ticker: Optional[asyncio.Task] = None
        self._subscription: Optional[Subscription] = None
        self.session = RunSession()

    @property
    def attached(self) -> bool:
        return self._ticker is not None or self._subscription is not None

    async def start(self) -> None:
        if self.session.status is RunStatus.stopped:
            self.session = RunSession()
        if self.session.status is not RunStatus.idle:
            raise InvalidRunTransition(f"Cannot start a run that is {self.session.status.value}")
        if not await self._source.request_permission():
            logger.warning("Location permission denied; run not started")
            raise LocationPermissionDenied("Location access was refused")
        self.session.start(self._clock())
        self._attach()

    def pause(self) -> None:
        if self.session.status is not RunStatus.running:
            raise InvalidRunTransition(f"Cannot pause a run that is {self.session.status.value}")
        # Detach both event sources before the state flips
        self._detach()
        self.session.pause()

    async def resume(self) -> None:
        self.session.resume()
        self._attach()

    def stop(self) -> Optional[FinishedRun]:
        self._detach()
        return self.session.stop(self._clock())

    def _attach(self) -> None:
        self._ticker = asyncio.get_running_loop().create_task(self._tick_forever())
        self._subscription = self._source.subscribe(self._on_fix)

    def _detach(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        if self._subscription is not None:
            self._subscription.remove()
            self._subscription = None

    async def _tick_forever(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self.session.tick()

    def _on_fix(self, fix: LocationFix) -> None:
        self.session.add_fix(fix)
