import logging
import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal, TypedDict

from checkin.config import QR_PERIOD_SECONDS
from checkin.status import window_from_session
from checkin.window import evaluate, parse_instant, resolve_now

logger = logging.getLogger(__name__)

GateState = Literal["before", "open", "closed", "invalid"]


class QrGate(TypedDict):
    gate: GateState
    sub_phase: Literal["ontime", "late"] | None
    slot: int | None
    period_seconds: int
    refresh_in_seconds: int | None
    closes_at: datetime | None


def resolve_period(period_seconds: Any = None) -> int:
    try:
        period = int(period_seconds) if period_seconds is not None else 0
    except (TypeError, ValueError):
        period = 0
    return period if period > 0 else QR_PERIOD_SECONDS


def qr_slot(now: datetime | None = None, period_seconds: Any = None) -> int:
    """Index of the rotating QR slot that contains `now`."""
    period = resolve_period(period_seconds)
    return int(resolve_now(now).timestamp() // period)


def seconds_until_next_slot(now: datetime | None = None, period_seconds: Any = None) -> int:
    period = resolve_period(period_seconds)
    stamp = resolve_now(now).timestamp()
    next_start = (int(stamp // period) + 1) * period
    return max(1, math.ceil(next_start - stamp))


def qr_gate(session: Mapping[str, Any], now: datetime | None = None) -> QrGate:
    """
    Decide whether the teacher display should show a QR payload right now.

    The slot index is what the backend signs; signing itself happens there.
    A class that has reached its end time is closed even if the check-in
    window is still running.
    """
    current = resolve_now(now)
    period = resolve_period(session.get("qr_period_seconds"))
    status = evaluate(window_from_session(session), current)
    phase = status["phase"]
    end = parse_instant(session.get("end"))

    gate: QrGate = {
        "gate": "invalid",
        "sub_phase": None,
        "slot": None,
        "period_seconds": period,
        "refresh_in_seconds": None,
        "closes_at": status["closed_at"],
    }
    if phase == "invalid":
        return gate
    if phase == "closed" or (end is not None and current >= end):
        gate["gate"] = "closed"
        return gate
    if phase == "before":
        gate["gate"] = "before"
        return gate

    gate["gate"] = "open"
    gate["sub_phase"] = "ontime" if phase == "ontime" else "late"
    gate["slot"] = qr_slot(current, period)
    gate["refresh_in_seconds"] = seconds_until_next_slot(current, period)
    logger.debug("QR gate open (%s), slot %s", gate["sub_phase"], gate["slot"])
    return gate
