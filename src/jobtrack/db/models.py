from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from jobtrack.db.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    avatar: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    google_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)


class Column(TimestampMixin, Base):
    __tablename__ = "columns"
    __table_args__ = (Index("ix_columns_user_order", "user_id", "order"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    color: Mapped[str | None] = mapped_column(String(40), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="generic", nullable=False)


class Job(TimestampMixin, Base):
    __tablename__ = "jobs"
    __table_args__ = (Index("ix_jobs_user_column_order", "user_id", "column_id", "order"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    column_id: Mapped[int] = mapped_column(ForeignKey("columns.id"), nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(255), nullable=False)
    job_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    tags_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    ctc_min: Mapped[float | None] = mapped_column(Float, nullable=True)
    ctc_max: Mapped[float | None] = mapped_column(Float, nullable=True)
    compensation_fixed: Mapped[float | None] = mapped_column(Float, nullable=True)
    compensation_variables: Mapped[float | None] = mapped_column(Float, nullable=True)
    compensation_rsu: Mapped[float | None] = mapped_column(Float, nullable=True)
    offered_ctc: Mapped[float | None] = mapped_column(Float, nullable=True)
    offered_compensation_fixed: Mapped[float | None] = mapped_column(Float, nullable=True)
    offered_compensation_variables: Mapped[float | None] = mapped_column(Float, nullable=True)
    offered_compensation_rsu: Mapped[float | None] = mapped_column(Float, nullable=True)

    resume_version: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes_markdown: Mapped[str | None] = mapped_column(Text, nullable=True)
    applied_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_working_day: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    hr_contacts_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    stage_history_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    interview_stages_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class InterviewRound(TimestampMixin, Base):
    __tablename__ = "interview_rounds"
    __table_args__ = (Index("ix_interview_rounds_job_date", "job_id", "date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_id: Mapped[int] = mapped_column(ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    stage: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes_markdown: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)


class ResumeVersion(TimestampMixin, Base):
    __tablename__ = "resume_versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)
