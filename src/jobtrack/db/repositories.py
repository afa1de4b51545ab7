from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import and_, delete, select
from sqlalchemy.orm import Session

from jobtrack.db.models import Column, InterviewRound, Job, ResumeVersion, User
from jobtrack.types import (
    APPLIED_TITLE,
    ColumnRef,
    GoogleProfile,
    InterviewStage,
    StageHistoryEntry,
    as_utc,
    dump_entries,
)


def infer_column_role(title: str) -> str:
    return "applied" if title.strip().lower() == APPLIED_TITLE else "generic"


def column_ref(column: Column) -> ColumnRef:
    return ColumnRef(id=column.id, title=column.title, role=column.role)


def stage_history_of(job: Job) -> list[StageHistoryEntry]:
    return [StageHistoryEntry.model_validate(item) for item in job.stage_history_json or []]


def interview_stages_of(job: Job) -> list[InterviewStage]:
    return [InterviewStage.model_validate(item) for item in job.interview_stages_json or []]


def applied_date_of(job: Job) -> datetime | None:
    return as_utc(job.applied_date)


class Repository:
    def __init__(self, session: Session):
        self.session = session

    # users

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(User.email == email))

    def get_user_by_google_id(self, google_id: str) -> User | None:
        return self.session.scalar(select(User).where(User.google_id == google_id))

    def create_user(self, *, name: str, email: str, avatar: str = "", google_id: str | None = None) -> User:
        user = User(name=name, email=email, avatar=avatar, google_id=google_id)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def upsert_google_user(self, profile: GoogleProfile) -> tuple[User, bool]:
        """Find the user by Google id, then by email (linking the account); create otherwise."""
        user = self.get_user_by_google_id(profile.google_id)
        if user:
            if profile.avatar and user.avatar != profile.avatar:
                user.avatar = profile.avatar
                self.session.commit()
                self.session.refresh(user)
            return user, False

        user = self.get_user_by_email(profile.email)
        if user:
            user.google_id = profile.google_id
            if profile.avatar:
                user.avatar = profile.avatar
            self.session.commit()
            self.session.refresh(user)
            return user, False

        user = self.create_user(
            name=profile.name or profile.email,
            email=profile.email,
            avatar=profile.avatar,
            google_id=profile.google_id,
        )
        return user, True

    # columns

    def list_columns(self, user_id: int) -> list[Column]:
        statement = select(Column).where(Column.user_id == user_id).order_by(Column.order.asc(), Column.id.asc())
        return list(self.session.scalars(statement).all())

    def get_column(self, user_id: int, column_id: int) -> Column | None:
        return self.session.scalar(select(Column).where(and_(Column.id == column_id, Column.user_id == user_id)))

    def column_refs(self, user_id: int) -> dict[int, ColumnRef]:
        return {column.id: column_ref(column) for column in self.list_columns(user_id)}

    def next_column_order(self, user_id: int) -> int:
        statement = select(Column.order).where(Column.user_id == user_id).order_by(Column.order.desc()).limit(1)
        current = self.session.scalar(statement)
        return 0 if current is None else current + 1

    def create_column(
        self,
        *,
        user_id: int,
        title: str,
        order: int | None = None,
        color: str | None = None,
        role: str | None = None,
    ) -> Column:
        column = Column(
            user_id=user_id,
            title=title,
            order=self.next_column_order(user_id) if order is None else order,
            color=color,
            role=role or infer_column_role(title),
        )
        self.session.add(column)
        self.session.commit()
        self.session.refresh(column)
        return column

    def update_column(self, column: Column, values: dict[str, Any]) -> Column:
        for key, value in values.items():
            setattr(column, key, value)
        self.session.commit()
        self.session.refresh(column)
        return column

    def delete_column(self, column: Column) -> int:
        """Delete the column along with its jobs and their interview rounds; returns the job count.

        Pending changes to other jobs in the session are committed in the same transaction.
        """
        job_ids = list(
            self.session.scalars(
                select(Job.id).where(and_(Job.user_id == column.user_id, Job.column_id == column.id))
            ).all()
        )
        if job_ids:
            self.session.execute(delete(InterviewRound).where(InterviewRound.job_id.in_(job_ids)))
            self.session.execute(delete(Job).where(Job.id.in_(job_ids)))
        self.session.delete(column)
        self.session.commit()
        return len(job_ids)

    # jobs

    def list_jobs(self, user_id: int) -> list[Job]:
        statement = (
            select(Job)
            .where(Job.user_id == user_id)
            .order_by(Job.column_id.asc(), Job.order.asc(), Job.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def get_job(self, user_id: int, job_id: int) -> Job | None:
        return self.session.scalar(select(Job).where(and_(Job.id == job_id, Job.user_id == user_id)))

    def get_jobs(self, user_id: int, job_ids: list[int]) -> list[Job]:
        statement = select(Job).where(and_(Job.user_id == user_id, Job.id.in_(job_ids)))
        return list(self.session.scalars(statement).all())

    def list_column_jobs(self, user_id: int, column_id: int, *, descending: bool = False) -> list[Job]:
        ordering = Job.order.desc() if descending else Job.order.asc()
        statement = (
            select(Job)
            .where(and_(Job.user_id == user_id, Job.column_id == column_id))
            .order_by(ordering, Job.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def column_job_orders(self, user_id: int, column_id: int, *, exclude_job_id: int | None = None) -> list[int]:
        return [
            job.order
            for job in self.list_column_jobs(user_id, column_id, descending=True)
            if job.id != exclude_job_id
        ]

    def add_job(self, job: Job) -> Job:
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)
        return job

    def save_job(
        self,
        job: Job,
        *,
        stage_history: list[StageHistoryEntry] | None = None,
        interview_stages: list[InterviewStage] | None = None,
    ) -> Job:
        # JSON columns are replaced wholesale so the ORM sees the change.
        if stage_history is not None:
            job.stage_history_json = dump_entries(stage_history)
        if interview_stages is not None:
            job.interview_stages_json = dump_entries(interview_stages)
        self.session.commit()
        self.session.refresh(job)
        return job

    def set_job_orders(self, jobs: list[Job]) -> None:
        for index, job in enumerate(jobs):
            job.order = index
        self.session.commit()

    def delete_job(self, job: Job) -> None:
        self.session.execute(delete(InterviewRound).where(InterviewRound.job_id == job.id))
        self.session.delete(job)
        self.session.commit()

    # interview rounds

    def create_interview(self, *, job_id: int, values: dict[str, Any]) -> InterviewRound:
        interview = InterviewRound(job_id=job_id, **values)
        self.session.add(interview)
        self.session.commit()
        self.session.refresh(interview)
        return interview

    def get_interview(self, user_id: int, interview_id: int) -> InterviewRound | None:
        statement = (
            select(InterviewRound)
            .join(Job, Job.id == InterviewRound.job_id)
            .where(and_(InterviewRound.id == interview_id, Job.user_id == user_id))
        )
        return self.session.scalar(statement)

    def list_job_interviews(self, job_id: int) -> list[InterviewRound]:
        statement = (
            select(InterviewRound)
            .where(InterviewRound.job_id == job_id)
            .order_by(InterviewRound.date.asc(), InterviewRound.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def list_user_interviews(
        self,
        user_id: int,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[InterviewRound]:
        conditions = [Job.user_id == user_id]
        if start is not None:
            conditions.append(InterviewRound.date >= start)
        if end is not None:
            conditions.append(InterviewRound.date <= end)
        statement = (
            select(InterviewRound)
            .join(Job, Job.id == InterviewRound.job_id)
            .where(and_(*conditions))
            .order_by(InterviewRound.date.asc(), InterviewRound.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def update_interview(self, interview: InterviewRound, values: dict[str, Any]) -> InterviewRound:
        for key, value in values.items():
            setattr(interview, key, value)
        self.session.commit()
        self.session.refresh(interview)
        return interview

    def delete_interview(self, interview: InterviewRound) -> None:
        self.session.delete(interview)
        self.session.commit()

    # resumes

    def create_resume(self, *, user_id: int, name: str, file_url: str) -> ResumeVersion:
        resume = ResumeVersion(user_id=user_id, name=name, file_url=file_url)
        self.session.add(resume)
        self.session.commit()
        self.session.refresh(resume)
        return resume

    def list_resumes(self, user_id: int) -> list[ResumeVersion]:
        statement = (
            select(ResumeVersion)
            .where(ResumeVersion.user_id == user_id)
            .order_by(ResumeVersion.created_at.desc(), ResumeVersion.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def get_resume(self, user_id: int, resume_id: int) -> ResumeVersion | None:
        return self.session.scalar(
            select(ResumeVersion).where(and_(ResumeVersion.id == resume_id, ResumeVersion.user_id == user_id))
        )

    def delete_resume(self, resume: ResumeVersion) -> None:
        self.session.delete(resume)
        self.session.commit()
