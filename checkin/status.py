import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
from typing import Any, Literal, TypedDict

from checkin.config import DEFAULT_LATE_MINUTES, DEFAULT_ON_TIME_MINUTES
from checkin.window import (
    Phase,
    WindowDescriptor,
    clamp_minutes,
    evaluate,
    minutes_late,
    parse_instant,
    resolve_now,
)

logger = logging.getLogger(__name__)

DisplayStatus = Literal["ontime", "late", "absent", "pending", "before"]
RecordedOutcome = Literal["ontime", "late"]

DISPLAY_STATUSES: tuple[DisplayStatus, ...] = ("ontime", "late", "absent", "pending", "before")

# Backend codes seen on attendance rows, plus the display spellings.
_RECORD_ALIASES: dict[str, RecordedOutcome] = {
    "ontime": "ontime",
    "on_time": "ontime",
    "on-time": "ontime",
    "dung_gio": "ontime",
    "late": "late",
    "tre": "late",
}

# An invalid window leans to "before": neutral, never absent or on time.
_PHASE_TO_STATUS: dict[Phase, DisplayStatus] = {
    "before": "before",
    "ontime": "pending",
    "late": "pending",
    "closed": "absent",
    "invalid": "before",
}

_LABELS: dict[str, str] = {
    "ontime": "On time",
    "late": "Late",
    "absent": "Absent",
    "before": "Not yet open",
    "pending": "Not checked in",
}


class SessionFields(TypedDict, total=False):
    start: datetime | str | None
    on_time_until: datetime | str | None
    close_at: datetime | str | None
    on_time_minutes: int | None
    late_minutes: int | None
    end: datetime | str | None
    qr_period_seconds: int | None


class RosterEntry(TypedDict, total=False):
    student_id: str
    record: str | None
    checked_in_at: datetime | str | None


class RosterRow(TypedDict):
    student_id: str
    status: DisplayStatus
    label: str
    minutes_late: int | None


class RosterSummary(TypedDict):
    phase: Phase
    total: int
    counts: dict[str, int]
    rows: list[RosterRow]


def normalize_record(record: Any) -> RecordedOutcome | None:
    if isinstance(record, Mapping):
        record = record.get("status")
    if not isinstance(record, str):
        return None
    return _RECORD_ALIASES.get(record.strip().lower())


def _status_for(outcome: RecordedOutcome | None, phase: Phase) -> DisplayStatus:
    if outcome is not None:
        return outcome
    return _PHASE_TO_STATUS[phase]


def derive_status(record: Any, window: WindowDescriptor, now: datetime | None = None) -> DisplayStatus:
    """
    Display status for one student in one session.

    A recorded outcome always wins. Without one, the live phase decides:
    before -> before, ontime/late -> pending, closed -> absent.
    """
    outcome = normalize_record(record)
    if outcome is not None:
        return outcome
    return _PHASE_TO_STATUS[evaluate(window, now)["phase"]]


def label_for_status(status: str) -> str:
    return _LABELS.get(status, _LABELS["pending"])


def _round_minutes(delta: timedelta) -> int:
    # half-up
    return math.floor(delta.total_seconds() / 60 + 0.5)


def window_from_session(session: Mapping[str, Any]) -> WindowDescriptor:
    """
    Resolve a session row into a window descriptor.

    Explicit minute fields take precedence; otherwise durations are read off
    the on_time_until / close_at instants, then off the configured defaults.
    """
    raw_start = session.get("start")
    start = parse_instant(raw_start)
    on_time_until = parse_instant(session.get("on_time_until"))
    close_at = parse_instant(session.get("close_at"))

    on_time = session.get("on_time_minutes")
    if on_time is None and start is not None and on_time_until is not None:
        on_time = _round_minutes(on_time_until - start)
    if on_time is None:
        on_time = DEFAULT_ON_TIME_MINUTES
    on_time = clamp_minutes(on_time)

    late = session.get("late_minutes")
    if late is None and start is not None and close_at is not None:
        try:
            late_from = start + timedelta(minutes=on_time)
        except OverflowError:
            late_from = None
        if late_from is not None:
            late = _round_minutes(close_at - late_from)
    if late is None:
        late = DEFAULT_LATE_MINUTES
    late = clamp_minutes(late)

    return {
        "start": start if start is not None else raw_start,
        "on_time_minutes": on_time,
        "late_minutes": late,
    }


def summarize_roster(
    entries: Iterable[Mapping[str, Any]],
    window: WindowDescriptor,
    now: datetime | None = None,
) -> RosterSummary:
    # One evaluation for the whole roster so every row sees the same instant.
    status = evaluate(window, resolve_now(now))
    phase = status["phase"]
    # Lateness counts from the end of the on-time sub-window, not from the late allowance.
    threshold = clamp_minutes(window.get("on_time_minutes"))

    counts: dict[str, int] = {s: 0 for s in DISPLAY_STATUSES}
    rows: list[RosterRow] = []
    for entry in entries:
        display = _status_for(normalize_record(entry.get("record")), phase)
        checked_in_at = entry.get("checked_in_at")
        late_by = None
        if parse_instant(checked_in_at) is not None and status["start"] is not None:
            late_by = minutes_late(checked_in_at, status["start"], threshold)
        counts[display] += 1
        rows.append(
            {
                "student_id": str(entry.get("student_id", "")),
                "status": display,
                "label": label_for_status(display),
                "minutes_late": late_by,
            }
        )

    logger.debug("Roster summary at phase %s: %s", phase, counts)
    return {
        "phase": phase,
        "total": len(rows),
        "counts": counts,
        "rows": rows,
    }
