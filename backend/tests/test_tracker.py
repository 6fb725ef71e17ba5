import asyncio
import math
from datetime import datetime, timedelta, timezone

import pytest

from runconquer.core.constants import EARTH_RADIUS_M
from runconquer.core.errors import InvalidRunTransition, LocationPermissionDenied
from runconquer.game.session import RunStatus
from runconquer.schemas.game import LocationFix
from runconquer.services.tracker import RunTracker

T0 = datetime(2025, 3, 1, 7, 0, tzinfo=timezone.utc)


def fix(meters_north, t=0):
    return LocationFix(
        latitude=40.0 + math.degrees(meters_north / EARTH_RADIUS_M),
        longitude=-74.0,
        speed=3.0,
        timestamp=T0 + timedelta(seconds=t),
    )


class FakeSubscription:
    def __init__(self, source, callback):
        self.source = source
        self.callback = callback

    def remove(self):
        self.source.callbacks.remove(self.callback)


class FakeSource:
    def __init__(self, granted=True):
        self.granted = granted
        self.callbacks = []

    async def request_permission(self):
        return self.granted

    def subscribe(self, callback):
        self.callbacks.append(callback)
        return FakeSubscription(self, callback)

    def emit(self, fix):
        for cb in list(self.callbacks):
            cb(fix)


def test_permission_denied_creates_no_state():
    async def scenario():
        source = FakeSource(granted=False)
        tracker = RunTracker(source)
        with pytest.raises(LocationPermissionDenied):
            await tracker.start()
        assert tracker.session.status is RunStatus.idle
        assert source.callbacks == []
        assert not tracker.attached

    asyncio.run(scenario())


def test_ticker_accrues_duration_only_while_running():
    async def scenario():
        tracker = RunTracker(FakeSource(), tick_interval=0.001, clock=lambda: T0)
        await tracker.start()
        await asyncio.sleep(0.05)
        assert tracker.session.duration > 0

        tracker.pause()
        paused_at = tracker.session.duration
        await asyncio.sleep(0.05)
        assert tracker.session.duration == paused_at
        tracker.stop()

    asyncio.run(scenario())


def test_pause_detaches_location_updates():
    async def scenario():
        source = FakeSource()
        tracker = RunTracker(source, tick_interval=60, clock=lambda: T0)
        await tracker.start()
        assert len(source.callbacks) == 1
        stale_callback = source.callbacks[0]

        source.emit(fix(0))
        source.emit(fix(20, t=5))
        tracker.pause()
        assert source.callbacks == []
        assert not tracker.attached

        # A late delivery through the old callback must not move a paused run
        stale_callback(fix(40, t=10))
        assert abs(tracker.session.distance - 20) < 1e-6

        with pytest.raises(InvalidRunTransition):
            tracker.pause()

        await tracker.resume()
        assert len(source.callbacks) == 1
        source.emit(fix(60, t=60))  # measured from the fix before the pause
        source.emit(fix(90, t=70))
        tracker.session.tick(30)

        run = tracker.stop()
        assert source.callbacks == []
        assert run is not None
        assert abs(run.distance - 90) < 1e-6
        assert run.duration == 30
        assert len(run.path) == 4

    asyncio.run(scenario())


def test_tracker_starts_a_fresh_run_after_stop():
    async def scenario():
        source = FakeSource()
        tracker = RunTracker(source, tick_interval=60, clock=lambda: T0)
        await tracker.start()
        source.emit(fix(0))
        source.emit(fix(50, t=10))
        tracker.session.tick(20)
        first = tracker.stop()
        assert first is not None

        await tracker.start()
        assert tracker.session.status is RunStatus.running
        assert tracker.session.distance == 0
        assert tracker.session.duration == 0
        assert len(source.callbacks) == 1

        with pytest.raises(InvalidRunTransition):
            await tracker.start()
        tracker.stop()

    asyncio.run(scenario())


def test_stop_below_threshold():
    async def scenario():
        source = FakeSource()
        tracker = RunTracker(source, tick_interval=60, clock=lambda: T0)
        await tracker.start()
        source.emit(fix(0))
        source.emit(fix(5, t=5))
        tracker.session.tick(5)
        assert tracker.stop() is None
        assert tracker.session.status is RunStatus.stopped

    asyncio.run(scenario())
