import logging

from fastapi import APIRouter

from checkin.schemas import MinutesLateRequest, RosterRequest, StatusRequest
from checkin.status import (
    derive_status,
    label_for_status,
    normalize_record,
    summarize_roster,
    window_from_session,
)
from checkin.window import can_check_in, evaluate, minutes_late, resolve_now

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/attendance/status")
def attendance_status(payload: StatusRequest):
    now = resolve_now(payload.now)
    window = window_from_session(payload.session.model_dump())
    window_status = evaluate(window, now)
    status = derive_status(payload.record, window, now)
    logger.info("Attendance status %s (phase %s)", status, window_status["phase"])
    return {
        "status": status,
        "label": label_for_status(status),
        "phase": window_status["phase"],
        "can_check_in": can_check_in(window_status) and normalize_record(payload.record) is None,
        "closed_at": window_status["closed_at"],
    }


@router.post("/attendance/roster")
def attendance_roster(payload: RosterRequest):
    window = window_from_session(payload.session.model_dump())
    summary = summarize_roster(
        [entry.model_dump() for entry in payload.entries],
        window,
        resolve_now(payload.now),
    )
    logger.info("Roster of %s entries summarized at phase %s", summary["total"], summary["phase"])
    return summary


@router.post("/attendance/minutes-late")
def attendance_minutes_late(payload: MinutesLateRequest):
    return {
        "minutes_late": minutes_late(
            payload.checked_in_at,
            payload.start,
            payload.threshold_minutes,
        )
    }
