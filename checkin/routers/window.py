import logging

from fastapi import APIRouter

from checkin.schemas import EvaluateRequest, SessionBody
from checkin.status import window_from_session
from checkin.window import can_check_in, evaluate, resolve_now, seconds_until_next_boundary

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/window/evaluate")
def evaluate_window(payload: EvaluateRequest):
    now = resolve_now(payload.now)
    window = window_from_session(payload.model_dump(exclude={"now"}))
    status = evaluate(window, now)
    logger.info("Window evaluated: start=%r phase=%s", payload.start, status["phase"])
    return {
        **status,
        "on_time_minutes": window["on_time_minutes"],
        "late_minutes": window["late_minutes"],
        "now": now,
        "seconds_to_next_boundary": seconds_until_next_boundary(status, now),
        "can_check_in": can_check_in(status),
    }


@router.post("/window/from-session")
def resolve_session_window(payload: SessionBody):
    return window_from_session(payload.model_dump())
