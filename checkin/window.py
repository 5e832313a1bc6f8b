import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Literal, TypedDict

from checkin.config import ASSUME_TZ

logger = logging.getLogger(__name__)

Phase = Literal["before", "ontime", "late", "closed", "invalid"]


class WindowDescriptor(TypedDict):
    start: datetime | str | None
    on_time_minutes: int
    late_minutes: int


class WindowStatus(TypedDict):
    phase: Phase
    start: datetime | None
    on_time_end: datetime | None
    late_end: datetime | None
    closed_at: datetime | None


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=ASSUME_TZ)
    return value


def resolve_now(now: datetime | None = None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return _as_aware(now)


def parse_instant(value: Any) -> datetime | None:
    """
    Normalize a backend timestamp to an aware datetime.

    Accepts datetimes and ISO-8601 strings (trailing "Z" included).
    Naive values are read in ASSUME_TZ. Returns None for anything missing
    or unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_aware(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return _as_aware(parsed)


def clamp_minutes(value: Any) -> int:
    """Durations below zero (or missing) count as zero."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        minutes = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if minutes < 0:
        logger.debug("Clamping negative duration %s to 0", minutes)
        return 0
    return minutes


def _invalid_status() -> WindowStatus:
    return {
        "phase": "invalid",
        "start": None,
        "on_time_end": None,
        "late_end": None,
        "closed_at": None,
    }


def evaluate(window: WindowDescriptor, now: datetime | None = None) -> WindowStatus:
    """
    Classify `now` against a session window.

    before:  now < start
    ontime:  start <= now < on_time_end
    late:    on_time_end <= now < late_end
    closed:  now >= late_end

    A missing or unparseable start gives phase "invalid" instead of raising.
    """
    raw_start = window.get("start")
    start = parse_instant(raw_start)
    if start is None:
        logger.debug("Cannot evaluate window, invalid start: %r", raw_start)
        return _invalid_status()

    try:
        on_time_end = start + timedelta(minutes=clamp_minutes(window.get("on_time_minutes")))
        late_end = on_time_end + timedelta(minutes=clamp_minutes(window.get("late_minutes")))
    except OverflowError:
        logger.debug("Window durations overflow for start %s", start.isoformat())
        return _invalid_status()

    current = resolve_now(now)
    phase: Phase
    if current < start:
        phase = "before"
    elif current < on_time_end:
        phase = "ontime"
    elif current < late_end:
        phase = "late"
    else:
        phase = "closed"

    return {
        "phase": phase,
        "start": start,
        "on_time_end": on_time_end,
        "late_end": late_end,
        "closed_at": late_end,
    }


def next_boundary(status: WindowStatus) -> datetime | None:
    if status["phase"] == "before":
        return status["start"]
    if status["phase"] == "ontime":
        return status["on_time_end"]
    if status["phase"] == "late":
        return status["late_end"]
    return None


def seconds_until_next_boundary(status: WindowStatus, now: datetime | None = None) -> int | None:
    boundary = next_boundary(status)
    if boundary is None:
        return None
    remaining = (boundary - resolve_now(now)).total_seconds()
    return max(0, math.ceil(remaining))


def can_check_in(status: WindowStatus) -> bool:
    # Advisory only; the backend makes the accept/reject decision.
    return status["phase"] in ("ontime", "late")


def minutes_late(checked_in_at: Any, start: Any, threshold_minutes: Any = 0) -> int:
    checked = parse_instant(checked_in_at)
    begin = parse_instant(start)
    if checked is None or begin is None:
        return 0
    diff = math.ceil((checked - begin).total_seconds() / 60) - clamp_minutes(threshold_minutes)
    return diff if diff > 0 else 0
