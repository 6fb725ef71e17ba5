"""Lifecycle of one active run: idle -> running <-> paused -> stopped."""

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Sequence

from runconquer.core.constants import MIN_RUN_DISTANCE_M, MIN_RUN_DURATION_S
from runconquer.core.errors import InvalidRunTransition
from runconquer.game.geo import FilterState, FixVerdict, apply_fix, reported_speed
from runconquer.schemas.game import Coordinate, FinishedRun, LocationFix

logger = logging.getLogger(__name__)


class RunStatus(str, Enum):
    idle = "idle"
    running = "running"
    paused = "paused"
    stopped = "stopped"


def qualifies(distance: float, duration: float) -> bool:
    """Minimum effort for a run to be kept (filters out accidental taps)."""
    return distance > MIN_RUN_DISTANCE_M and duration > MIN_RUN_DURATION_S


def average_speed(distance: float, duration: float) -> float:
    if duration <= 0:
        return 0.0
    return distance / duration


class RunSession:
    """One run instance.

    The duration ticker and the location callback are independent event
    sources, so every mutation goes through `_lock`. Ticks and fixes that
    arrive while the session is not running are ignored.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._status = RunStatus.idle
        self._filter = FilterState()
        self._duration = 0
        self._max_speed = 0.0
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def distance(self) -> float:
        return self._filter.distance

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def path(self) -> tuple[Coordinate, ...]:
        return self._filter.path

    @property
    def max_speed(self) -> float:
        return self._max_speed

    def _require(self, action: str, *allowed: RunStatus) -> None:
        if self._status not in allowed:
            raise InvalidRunTransition(f"Cannot {action} a run that is {self._status.value}")

    def start(self, now: datetime) -> None:
        with self._lock:
            self._require("start", RunStatus.idle)
            self.start_time = now
            self._status = RunStatus.running

    def pause(self) -> None:
        with self._lock:
            self._require("pause", RunStatus.running)
            self._status = RunStatus.paused

    def resume(self) -> None:
        with self._lock:
            self._require("resume", RunStatus.paused)
            # The last accepted fix survives the pause; the distance gate
            # still applies to the first fix afterwards.
            self._status = RunStatus.running

    def tick(self, seconds: int = 1) -> bool:
        with self._lock:
            if self._status is not RunStatus.running:
                return False
            self._duration += seconds
            return True

    def add_fix(self, fix: LocationFix) -> Optional[FixVerdict]:
        """Feed one fix; returns None when the session isn't running."""
        with self._lock:
            if self._status is not RunStatus.running:
                return None
            self._filter, verdict = apply_fix(self._filter, fix)
            if verdict.accepted:
                self._max_speed = max(self._max_speed, reported_speed(fix))
            return verdict

    def stop(self, now: datetime) -> Optional[FinishedRun]:
        """End the run. Returns None when it is below the minimum effort."""
        with self._lock:
            self._require("stop", RunStatus.running, RunStatus.paused)
            self._status = RunStatus.stopped
            self.end_time = now
            distance, duration = self._filter.distance, self._duration

            if not qualifies(distance, duration):
                logger.info("Discarding run: %.1f m in %d s is below the minimum", distance, duration)
                return None

            return FinishedRun(
                start_time=self.start_time,
                end_time=now,
                duration=duration,
                distance=distance,
                avg_pace=average_speed(distance, duration),
                max_speed=self._max_speed,
                path=self._filter.path,
            )


def replay_run(
    segments: Iterable[Sequence[LocationFix]],
    *,
    duration: Optional[int] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
) -> Optional[FinishedRun]:
    """Drive a fresh session from recorded fixes.

    Each segment is one un-paused stretch. When `duration` is None it is
    taken from the fix timestamps of each segment (time between segments
    is not counted). Distance between segments is credited the same way
    a resumed run credits it.
    """
    segments = [list(seg) for seg in segments if seg]
    if start_time is None:
        if not segments:
            return None
        start_time = segments[0][0].timestamp

    session = RunSession()
    session.start(start_time)
    if duration is not None:
        session.tick(duration)

    for seg in segments:
        seg_start = seg[0].timestamp
        ticked = 0
        for fix in seg:
            if duration is None:
                elapsed = int((fix.timestamp - seg_start).total_seconds())
                if elapsed > ticked:
                    session.tick(elapsed - ticked)
                    ticked = elapsed
            session.add_fix(fix)

    if end_time is None:
        end_time = segments[-1][-1].timestamp if segments else start_time
    return session.stop(end_time)
