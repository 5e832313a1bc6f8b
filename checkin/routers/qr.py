from fastapi import APIRouter, HTTPException

from checkin.qr import qr_gate, qr_slot, resolve_period, seconds_until_next_slot
from checkin.schemas import GateRequest
from checkin.window import resolve_now

router = APIRouter()


def _check_period(period_seconds: int | None) -> None:
    if period_seconds is not None and period_seconds <= 0:
        raise HTTPException(status_code=400, detail="QR period must be positive.")


@router.post("/qr/gate")
def gate(payload: GateRequest):
    _check_period(payload.session.qr_period_seconds)
    return qr_gate(payload.session.model_dump(), payload.now)


@router.get("/qr/slot")
def slot(period_seconds: int | None = None):
    _check_period(period_seconds)
    now = resolve_now()
    period = resolve_period(period_seconds)
    return {
        "slot": qr_slot(now, period),
        "period_seconds": period,
        "refresh_in_seconds": seconds_until_next_slot(now, period),
    }
