"""Recorded activity files as a location source.

Both readers return a list of fix segments, one per un-paused stretch,
ready for `runconquer.game.session.replay_run`.
"""

import logging

import gpxpy
import gpxpy.gpx
from fitparse import FitFile

from runconquer.core.time_utils import as_utc
from runconquer.schemas.game import LocationFix

logger = logging.getLogger(__name__)

Segments = list[list[LocationFix]]


def fixes_from_gpx(source) -> Segments:
    """Parse GPX text or a file object; each track segment is one stretch.

    Points without a timestamp are skipped. When a point carries no speed
    it is derived from the previous point.
    """
    gpx = gpxpy.parse(source)

    segments: Segments = []
    for track in gpx.tracks:
        for segment in track.segments:
            fixes = []
            prev = None
            for p in segment.points:
                if p.time is None:
                    continue
                speed = p.speed
                if speed is None and prev is not None:
                    speed = p.speed_between(prev)
                fixes.append(
                    LocationFix(
                        latitude=p.latitude,
                        longitude=p.longitude,
                        speed=speed,
                        timestamp=as_utc(p.time),
                    )
                )
                prev = p
            if fixes:
                segments.append(fixes)

    logger.debug("GPX import: %d segments, %d fixes", len(segments), sum(len(s) for s in segments))
    return segments


def _semicircles_to_degrees(val):
    return val * (180 / 2**31) if val is not None else None


def fixes_from_fit(source) -> Segments:
    """Read `record` messages from a FIT file (path or file object).

    Timer stop events close the current stretch.
    """
    ff = FitFile(source)

    segments: Segments = []
    current: list[LocationFix] = []
    for msg in ff.get_messages(["record", "event"]):
        fields = {f.name: f.value for f in msg}
        if msg.name == "event":
            if fields.get("event") == "timer" and str(fields.get("event_type", "")).startswith("stop"):
                if current:
                    segments.append(current)
                current = []
            continue

        lat = _semicircles_to_degrees(fields.get("position_lat"))
        lon = _semicircles_to_degrees(fields.get("position_long"))
        ts = fields.get("timestamp")
        if lat is None or lon is None or ts is None:
            continue
        # Prefer enhanced fields when present
        speed = fields.get("enhanced_speed")
        if speed is None:
            speed = fields.get("speed")
        current.append(
            LocationFix(
                latitude=lat,
                longitude=lon,
                speed=float(speed) if speed is not None else None,
                timestamp=as_utc(ts),
            )
        )
    if current:
        segments.append(current)

    logger.debug("FIT import: %d segments, %d fixes", len(segments), sum(len(s) for s in segments))
    return segments
