from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

ColumnRole = Literal["applied", "generic"]
InterviewRoundStatus = Literal["pending", "completed", "cancelled"]
InterviewStageStatus = Literal[
    "Pending",
    "Scheduled",
    "Cleared",
    "Rejected",
    "Shortlisted",
    "Pending Results",
    "Abandoned by HR",
    "Back Off",
    "Budget Issue",
    "Notice Period Issue",
    "No Offer",
    "Position Closed",
    "Position On Hold",
    "Offer Received",
    "Offer Accepted",
    "Offer Declined",
]

APPLIED_TITLE = "applied"


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def coerce_datetime(value: Any) -> Any:
    """Accept date-only strings and naive datetimes as UTC; empty string means unset."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return value
        return as_utc(parsed)
    return value


class ColumnRef(BaseModel):
    id: int
    title: str
    role: ColumnRole = "generic"

    @property
    def is_applied(self) -> bool:
        return self.role == "applied" or self.title.strip().lower() == APPLIED_TITLE


class StageHistoryEntry(BaseModel):
    column_id: int
    column_title: str = ""
    entered_date: datetime

    @field_validator("entered_date", mode="before")
    @classmethod
    def normalize_date(cls, value: Any) -> Any:
        return coerce_datetime(value)


class InterviewStage(BaseModel):
    stage_id: int
    stage_name: str = ""
    status: InterviewStageStatus = "Pending"
    date: datetime | None = None
    order: int = 0

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value: Any) -> Any:
        return coerce_datetime(value)


class HRContact(BaseModel):
    name: str = ""
    phone: str = ""
    email: str = ""


class GoogleProfile(BaseModel):
    google_id: str
    email: str
    name: str = ""
    avatar: str = ""


class TokenPayload(BaseModel):
    user_id: int
    expires_at: datetime


def dump_entries(entries: list[BaseModel]) -> list[dict[str, Any]]:
    return [entry.model_dump(mode="json") for entry in entries]


def utcnow() -> datetime:
    return datetime.now(UTC)

