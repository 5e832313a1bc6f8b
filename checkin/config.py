import os
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _parse_bool(value: str | None, fallback: bool) -> bool:
    if value is None:
        return fallback
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return fallback


def _parse_csv(value: str | None, fallback: list[str]) -> list[str]:
    if not value:
        return fallback
    parsed = [item.strip() for item in value.split(",") if item.strip()]
    return parsed or fallback


def _parse_minutes(value: str | None, fallback: int) -> int:
    if not value:
        return fallback
    try:
        return max(0, int(value.strip()))
    except ValueError:
        return fallback


def _parse_positive_int(value: str | None, fallback: int) -> int:
    if not value:
        return fallback
    try:
        parsed = int(value.strip())
    except ValueError:
        return fallback
    return parsed if parsed > 0 else fallback


def _parse_tz(value: str | None) -> tzinfo:
    name = (value or "").strip()
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def _parse_log_level(value: str | None) -> str:
    normalized = (value or "").strip().upper()
    if normalized in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return normalized
    return "INFO"


DEFAULT_ON_TIME_MINUTES = _parse_minutes(os.getenv("CHECKIN_DEFAULT_ON_TIME_MINUTES"), 15)
DEFAULT_LATE_MINUTES = _parse_minutes(os.getenv("CHECKIN_DEFAULT_LATE_MINUTES"), 10)
QR_PERIOD_SECONDS = _parse_positive_int(os.getenv("CHECKIN_QR_PERIOD_SECONDS"), 20)

# Naive timestamps coming from the backend are read in this zone.
ASSUME_TZ = _parse_tz(os.getenv("CHECKIN_ASSUME_TZ"))

LOG_LEVEL = _parse_log_level(os.getenv("CHECKIN_LOG_LEVEL"))

CORS_ALLOW_ORIGINS = _parse_csv(
    os.getenv("CHECKIN_CORS_ALLOW_ORIGINS"),
    ["http://localhost:8081", "http://127.0.0.1:8081"],
)
CORS_ALLOW_METHODS = _parse_csv(
    os.getenv("CHECKIN_CORS_ALLOW_METHODS"),
    ["GET", "POST", "OPTIONS"],
)
CORS_ALLOW_HEADERS = _parse_csv(
    os.getenv("CHECKIN_CORS_ALLOW_HEADERS"),
    ["Authorization", "Content-Type", "Accept"],
)
CORS_ALLOW_CREDENTIALS = _parse_bool(os.getenv("CHECKIN_CORS_ALLOW_CREDENTIALS"), True)
