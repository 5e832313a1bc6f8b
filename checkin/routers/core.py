from fastapi import APIRouter

from checkin.config import (
    ASSUME_TZ,
    DEFAULT_LATE_MINUTES,
    DEFAULT_ON_TIME_MINUTES,
    QR_PERIOD_SECONDS,
)

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/config/attendance")
def attendance_config():
    return {
        "default_on_time_minutes": DEFAULT_ON_TIME_MINUTES,
        "default_late_minutes": DEFAULT_LATE_MINUTES,
        "qr_period_seconds": QR_PERIOD_SECONDS,
        "assume_tz": str(ASSUME_TZ),
    }
