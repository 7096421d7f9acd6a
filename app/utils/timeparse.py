"""Parsing helpers for the ``HH:MM`` times, ``YYYY-MM-DD`` dates and
vehicle time slots stored on rows."""
import re
from datetime import date, datetime, timedelta, timezone

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_SLOT_SPLIT_RE = re.compile(r"\s*[–—-]\s*")
_AMPM_RE = re.compile(r"\s*(AM|PM)$", re.IGNORECASE)

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str | None) -> int | None:
    """Return minutes since midnight for ``HH:MM`` / ``HH:MM:SS``, else None."""
    if not value:
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM``, clamped to the same day."""
    minutes = max(0, min(minutes, MINUTES_PER_DAY - 1))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(value: str, minutes: int) -> str:
    start = parse_hhmm(value)
    if start is None:
        raise ValueError(f"Invalid time: {value!r}")
    return format_minutes(start + minutes)


def parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def date_for_day(project_start: str | date, day: int) -> date:
    """Calendar date of a 1-based project day."""
    start = parse_date(project_start) if isinstance(project_start, str) else project_start
    if start is None:
        raise ValueError(f"Invalid project start date: {project_start!r}")
    return start + timedelta(days=day - 1)


def at_minutes(day: date, minutes: int) -> datetime:
    return datetime(day.year, day.month, day.day) + timedelta(minutes=minutes)


def _clock(part: str) -> tuple[int, int] | None:
    pieces = part.split(":")
    try:
        hour = int(pieces[0])
        minute = int(pieces[1]) if len(pieces) > 1 and pieces[1] else 0
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def parse_time_slot(slot: str | None) -> tuple[int, int] | None:
    """Parse a vehicle time slot into ``(start, end)`` minutes since midnight.

    Accepts 24-hour ranges such as ``08:30-11:30`` and 12-hour ranges with a
    trailing meridiem such as ``8:30–11:30 AM`` or ``1:00–4:00 PM``. The
    meridiem applies to both ends, except that a range ending at 12 PM
    (``9:00–12:00 PM``) starts in the morning.
    """
    if not slot:
        return None
    text = " ".join(slot.split())
    ampm_match = _AMPM_RE.search(text)
    meridiem = ampm_match.group(1).upper() if ampm_match else None
    if ampm_match:
        text = text[:ampm_match.start()]

    parts = _SLOT_SPLIT_RE.split(text.strip())
    if len(parts) != 2:
        return None
    start, end = _clock(parts[0]), _clock(parts[1])
    if start is None or end is None:
        return None
    (start_hour, start_min), (end_hour, end_min) = start, end

    if meridiem is not None:
        is_pm = meridiem == "PM"
        start_is_pm = is_pm and not (end_hour == 12 and start_hour < 12)
        if start_is_pm and start_hour < 12:
            start_hour += 12
        elif not start_is_pm and start_hour == 12:
            start_hour = 0
        if is_pm and end_hour < 12:
            end_hour += 12
        elif not is_pm and end_hour == 12:
            end_hour = 0

    return start_hour * 60 + start_min, end_hour * 60 + end_min


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
