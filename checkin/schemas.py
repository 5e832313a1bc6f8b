from datetime import datetime

from pydantic import BaseModel


class SessionBody(BaseModel):
    start: str | None = None
    on_time_until: str | None = None
    close_at: str | None = None
    on_time_minutes: int | None = None
    late_minutes: int | None = None
    end: str | None = None
    qr_period_seconds: int | None = None


class EvaluateRequest(BaseModel):
    start: str | None = None
    on_time_minutes: int | None = None
    late_minutes: int | None = None
    now: datetime | None = None


class RosterEntryBody(BaseModel):
    student_id: str
    record: str | None = None
    checked_in_at: str | None = None


class StatusRequest(BaseModel):
    session: SessionBody
    record: str | None = None
    now: datetime | None = None


class RosterRequest(BaseModel):
    session: SessionBody
    entries: list[RosterEntryBody] = []
    now: datetime | None = None


class MinutesLateRequest(BaseModel):
    checked_in_at: str | None = None
    start: str | None = None
    threshold_minutes: int = 0


class GateRequest(BaseModel):
    session: SessionBody
    now: datetime | None = None
