from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from jobtrack.core.normalize import finite_number_or_none
from jobtrack.types import (
    ColumnRole,
    HRContact,
    InterviewRoundStatus,
    InterviewStage,
    StageHistoryEntry,
    coerce_datetime,
)

_NUMBER_FIELDS = (
    "ctc_min",
    "ctc_max",
    "compensation_fixed",
    "compensation_variables",
    "compensation_rsu",
    "offered_ctc",
    "offered_compensation_fixed",
    "offered_compensation_variables",
    "offered_compensation_rsu",
)


class SuccessResponse(BaseModel):
    success: bool = True
    message: str = ""


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    avatar: str = ""


class ColumnCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    order: int | None = None
    color: str | None = None
    role: ColumnRole | None = None


class ColumnUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    order: int | None = None
    color: str | None = None
    role: ColumnRole | None = None


class ColumnResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    order: int
    color: str | None
    role: ColumnRole
    created_at: datetime | None = None


class _JobFields(BaseModel):
    job_url: str | None = None
    tags: list[str] | None = None

    ctc_min: float | None = None
    ctc_max: float | None = None
    compensation_fixed: float | None = None
    compensation_variables: float | None = None
    compensation_rsu: float | None = None
    offered_ctc: float | None = None
    offered_compensation_fixed: float | None = None
    offered_compensation_variables: float | None = None
    offered_compensation_rsu: float | None = None

    resume_version: str | None = None
    notes_markdown: str | None = None
    applied_date: datetime | None = None
    last_working_day: datetime | None = None
    hr_contacts: list[HRContact] | None = None
    interview_stages: list[InterviewStage] | None = None

    @field_validator(*_NUMBER_FIELDS, mode="before")
    @classmethod
    def normalize_number(cls, value: Any) -> float | None:
        return finite_number_or_none(value)

    @field_validator("applied_date", "last_working_day", mode="before")
    @classmethod
    def normalize_date(cls, value: Any) -> Any:
        return coerce_datetime(value)

    @field_validator("job_url")
    @classmethod
    def validate_job_url(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return value
        if not value.strip().lower().startswith(("http://", "https://")):
            raise ValueError("job_url must be an http(s) URL")
        return value.strip()

    @model_validator(mode="after")
    def validate_ctc_range(self) -> _JobFields:
        if self.ctc_min is not None and self.ctc_max is not None and self.ctc_min > self.ctc_max:
            raise ValueError("ctc_min must not exceed ctc_max")
        return self


class JobCreateRequest(_JobFields):
    column_id: int | None = None
    company_name: str = Field(min_length=1)
    role: str = Field(min_length=1)
    location: str = Field(min_length=1)


class JobUpdateRequest(_JobFields):
    column_id: int | None = None
    company_name: str | None = Field(default=None, min_length=1)
    role: str | None = Field(default=None, min_length=1)
    location: str | None = Field(default=None, min_length=1)


class JobMoveRequest(BaseModel):
    column_id: int


class JobReorderRequest(BaseModel):
    job_ids: list[int]


class JobResponse(BaseModel):
    id: int
    user_id: int
    column_id: int
    company_name: str
    role: str
    job_url: str | None
    location: str
    tags: list[str]
    ctc_min: float | None
    ctc_max: float | None
    compensation_fixed: float | None
    compensation_variables: float | None
    compensation_rsu: float | None
    offered_ctc: float | None
    offered_compensation_fixed: float | None
    offered_compensation_variables: float | None
    offered_compensation_rsu: float | None
    resume_version: str | None
    notes_markdown: str | None
    applied_date: datetime | None
    last_working_day: datetime | None
    hr_contacts: list[HRContact]
    stage_history: list[StageHistoryEntry]
    interview_stages: list[InterviewStage]
    order: int
    created_at: datetime | None
    updated_at: datetime | None


class InterviewCreateRequest(BaseModel):
    job_id: int
    stage: str = Field(min_length=1)
    date: datetime
    time: str | None = None
    end_time: str | None = None
    notes_markdown: str | None = None
    status: InterviewRoundStatus = "pending"

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value: Any) -> Any:
        return coerce_datetime(value)


class InterviewUpdateRequest(BaseModel):
    stage: str | None = Field(default=None, min_length=1)
    date: datetime | None = None
    time: str | None = None
    end_time: str | None = None
    notes_markdown: str | None = None
    status: InterviewRoundStatus | None = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value: Any) -> Any:
        return coerce_datetime(value)


class InterviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    stage: str
    date: datetime
    time: str | None
    end_time: str | None
    notes_markdown: str | None
    status: InterviewRoundStatus
    created_at: datetime | None = None


class ResumeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    file_url: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
