from datetime import date, datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_local_datetime(dt: datetime, tz_name: str | None = None) -> datetime:
    """Convert a datetime (assume UTC if naive) to local or given tz.

    - If `tz_name` is 'local' or None: use system local timezone.
    - If `tz_name` is IANA tz name (e.g., 'America/New_York'): use that.
    - Unknown tz names fall back to the system local timezone.
    """
    dt = as_utc(dt)
    if tz_name and tz_name != "local":
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

        try:
            return dt.astimezone(ZoneInfo(tz_name))
        except ZoneInfoNotFoundError:
            return dt.astimezone()
    return dt.astimezone()


def local_date(dt: datetime, tz_name: str | None = None) -> date:
    """Calendar date of `dt` in the configured timezone."""
    return to_local_datetime(dt, tz_name).date()


def format_duration(total_seconds: float) -> str:
    """
    Format seconds as 'M:SS', or 'H:MM:SS' once past an hour.
    Example: 2732 -> '45:32', 3725 -> '1:02:05'
    """
    total = int(total_seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def format_distance(meters: float) -> str:
    """
    Whole meters under a kilometer, otherwise kilometers with 2 decimals.
    Example: 850.4 -> '850m', 1234.5 -> '1.23km'
    """
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.2f}km"


def format_pace(meters_per_second: float) -> str:
    """
    Convert a speed in m/s to pace per kilometer as 'M:SS'.
    Example: 2.5 m/s -> '6:40'. Not moving -> '--:--'.
    """
    if meters_per_second <= 0:
        return "--:--"

    pace_min_per_km = 1000 / meters_per_second / 60
    minutes = int(pace_min_per_km)
    seconds = round((pace_min_per_km - minutes) * 60)
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes}:{seconds:02d}"
