from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from jobtrack.core.errors import BoardValidationError, NotFoundError
from jobtrack.core.normalize import COMPENSATION_FIELDS, blank_to_none, clean_tags, finite_number_or_none
from jobtrack.core.reconciliation import (
    drop_column_stages,
    ensure_interview_stage,
    furthest_stage,
    next_job_order,
    plan_move,
    plan_stage_list_update,
    record_stage_entry,
    stage_entry_date,
    sync_applied_history,
    validate_stage_list,
)
from jobtrack.core.runtime import ColumnLocks, get_column_locks
from jobtrack.db.models import Column, Job
from jobtrack.db.repositories import (
    Repository,
    applied_date_of,
    column_ref,
    interview_stages_of,
    stage_history_of,
)
from jobtrack.db.seed import seed_default_columns
from jobtrack.types import HRContact, InterviewStage, as_utc, coerce_datetime, dump_entries, utcnow

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("company_name", "role", "location", "resume_version", "notes_markdown")
_REQUIRED_JOB_FIELDS = ("company_name", "role", "location")
_REQUIRED_COLUMN_FIELDS = ("title", "order", "role")


class BoardService:
    """Column and job operations for one user's board."""

    def __init__(self, db: Session, locks: ColumnLocks | None = None):
        self.db = db
        self.repo = Repository(db)
        self.locks = locks or get_column_locks()

    # columns

    def ensure_board(self, user_id: int) -> int:
        inserted = seed_default_columns(self.db, user_id)
        if inserted:
            logger.info("Seeded %s default columns for user %s", inserted, user_id)
        return inserted

    def create_column(
        self,
        user_id: int,
        *,
        title: str,
        order: int | None = None,
        color: str | None = None,
        role: str | None = None,
    ) -> Column:
        return self.repo.create_column(user_id=user_id, title=title, order=order, color=color, role=role)

    def update_column(self, user_id: int, column_id: int, values: dict[str, Any]) -> Column:
        column = self._column(user_id, column_id)
        values = _without_nulls(values, _REQUIRED_COLUMN_FIELDS)
        if not values:
            return column
        return self.repo.update_column(column, values)

    def delete_column(self, user_id: int, column_id: int) -> int:
        column = self._column(user_id, column_id)
        # Stage history keeps its entries for the column as a log; only the stepper must reference live columns.
        pruned = 0
        for job in self.repo.list_jobs(user_id):
            if job.column_id == column.id:
                continue
            stages = drop_column_stages(interview_stages_of(job), column.id)
            if stages is not None:
                job.interview_stages_json = dump_entries(stages)
                pruned += 1
        with self.locks.hold(user_id, column.id):
            removed = self.repo.delete_column(column)
        self.locks.forget(user_id, column_id)
        logger.info(
            "Deleted column %s for user %s with %s jobs (stage removed from %s others)",
            column_id,
            user_id,
            removed,
            pruned,
        )
        return removed

    # jobs

    def create_job(self, user_id: int, values: dict[str, Any]) -> Job:
        values = dict(values)
        submitted_stages = values.pop("interview_stages", None)
        column_id = values.pop("column_id", None)
        applied_date = coerce_datetime(values.pop("applied_date", None))
        now = utcnow()

        columns = self.repo.column_refs(user_id)
        fallback: datetime | None = None
        if submitted_stages is not None:
            stages = validate_stage_list(_stages(submitted_stages), columns)
            furthest = furthest_stage(stages)
            target = columns[furthest.stage_id]
            fallback = furthest.date
        elif column_id is not None:
            if column_id not in columns:
                raise NotFoundError("Column", column_id)
            target = columns[column_id]
            stages = None
        else:
            raise BoardValidationError("column_id or interview_stages is required")

        entered = stage_entry_date(target, applied_date, now=now, fallback=fallback)
        if stages is None:
            stages = ensure_interview_stage([], target, now=entered)
        history = record_stage_entry([], target, entered)

        job = Job(user_id=user_id, column_id=target.id, applied_date=applied_date)
        self._apply_fields(job, values)
        with self.locks.hold(user_id, target.id):
            job.order = next_job_order(self.repo.column_job_orders(user_id, target.id))
            job.stage_history_json = dump_entries(history)
            job.interview_stages_json = dump_entries(stages)
            job = self.repo.add_job(job)

        logger.info("Created job %s in column %s for user %s", job.id, target.id, user_id)
        return job

    def update_job(self, user_id: int, job_id: int, values: dict[str, Any]) -> Job:
        job = self._job(user_id, job_id)
        values = dict(values)
        submitted_stages = values.pop("interview_stages", None)
        column_id = values.pop("column_id", None)
        new_applied = coerce_datetime(values.pop("applied_date", None))
        now = utcnow()

        previous_applied = applied_date_of(job)
        applied_changed = new_applied is not None and new_applied != previous_applied
        effective_applied = new_applied if new_applied is not None else previous_applied

        history = stage_history_of(job)
        stages: list[InterviewStage] | None = None
        target_id = job.column_id

        if submitted_stages is not None:
            plan = plan_stage_list_update(
                current_column_id=job.column_id,
                stage_history=history,
                submitted_stages=_stages(submitted_stages),
                columns=self.repo.column_refs(user_id),
                applied_date=effective_applied,
                applied_date_changed=applied_changed,
                now=now,
            )
            history, stages, target_id = plan.stage_history, plan.interview_stages, plan.column_id
        elif column_id is not None and column_id != job.column_id:
            target = column_ref(self._column(user_id, column_id))
            entered = stage_entry_date(target, effective_applied, now=now)
            history = record_stage_entry(history, target, entered)
            stages = ensure_interview_stage(interview_stages_of(job), target, now=now)
            target_id = target.id
        elif applied_changed:
            current = self.repo.get_column(user_id, job.column_id)
            if current is not None:
                history = sync_applied_history(
                    history,
                    column_ref(current),
                    applied_date=effective_applied,
                    applied_date_changed=True,
                )

        self._apply_fields(job, values)
        if new_applied is not None:
            job.applied_date = new_applied

        if target_id != job.column_id:
            with self.locks.hold(user_id, target_id):
                job.order = next_job_order(self.repo.column_job_orders(user_id, target_id, exclude_job_id=job.id))
                job.column_id = target_id
                job = self.repo.save_job(job, stage_history=history, interview_stages=stages)
            logger.info("Job %s moved to column %s by edit", job.id, target_id)
            return job

        return self.repo.save_job(job, stage_history=history, interview_stages=stages)

    def move_job(self, user_id: int, job_id: int, column_id: int) -> Job:
        column = self._column(user_id, column_id)
        job = self._job(user_id, job_id)
        target = column_ref(column)

        with self.locks.hold(user_id, target.id):
            plan = plan_move(
                stage_history=stage_history_of(job),
                interview_stages=interview_stages_of(job),
                applied_date=applied_date_of(job),
                target=target,
                sibling_orders=self.repo.column_job_orders(user_id, target.id, exclude_job_id=job.id),
                now=utcnow(),
            )
            job.column_id = plan.column_id
            job.order = plan.order
            job = self.repo.save_job(job, stage_history=plan.stage_history, interview_stages=plan.interview_stages)

        logger.info("Moved job %s to column %s (order=%s)", job.id, target.id, job.order)
        return job

    def reorder_jobs(self, user_id: int, job_ids: list[int]) -> None:
        if not job_ids:
            raise BoardValidationError("job_ids must not be empty")
        if len(set(job_ids)) != len(job_ids):
            raise BoardValidationError("job_ids must not contain duplicates")

        found = {job.id: job for job in self.repo.get_jobs(user_id, job_ids)}
        missing = [job_id for job_id in job_ids if job_id not in found]
        if missing:
            raise NotFoundError("Job", missing[0])

        column_ids = {job.column_id for job in found.values()}
        if len(column_ids) != 1:
            raise BoardValidationError("all jobs must belong to the same column")

        (column_id,) = column_ids
        with self.locks.hold(user_id, column_id):
            self.repo.set_job_orders([found[job_id] for job_id in job_ids])

    def delete_job(self, user_id: int, job_id: int) -> None:
        job = self._job(user_id, job_id)
        self.repo.delete_job(job)
        logger.info("Deleted job %s for user %s", job_id, user_id)

    def serialize_job(self, job: Job) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": job.id,
            "user_id": job.user_id,
            "column_id": job.column_id,
            "company_name": job.company_name,
            "role": job.role,
            "job_url": job.job_url,
            "location": job.location,
            "tags": list(job.tags_json or []),
            "resume_version": job.resume_version,
            "notes_markdown": job.notes_markdown,
            "applied_date": as_utc(job.applied_date),
            "last_working_day": as_utc(job.last_working_day),
            "hr_contacts": [HRContact.model_validate(item) for item in job.hr_contacts_json or []],
            "stage_history": stage_history_of(job),
            "interview_stages": interview_stages_of(job),
            "order": job.order,
            "created_at": as_utc(job.created_at),
            "updated_at": as_utc(job.updated_at),
        }
        for field in COMPENSATION_FIELDS:
            payload[field] = getattr(job, field)
        return payload

    # helpers

    def _column(self, user_id: int, column_id: int) -> Column:
        column = self.repo.get_column(user_id, column_id)
        if column is None:
            raise NotFoundError("Column", column_id)
        return column

    def _job(self, user_id: int, job_id: int) -> Job:
        job = self.repo.get_job(user_id, job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        return job

    @staticmethod
    def _apply_fields(job: Job, values: dict[str, Any]) -> None:
        values = _without_nulls(values, _REQUIRED_JOB_FIELDS)
        for field in _TEXT_FIELDS:
            if field in values:
                setattr(job, field, values[field])
        for field in COMPENSATION_FIELDS:
            if field in values:
                setattr(job, field, finite_number_or_none(values[field]))
        if "job_url" in values:
            job.job_url = blank_to_none(values["job_url"])
        if "tags" in values:
            job.tags_json = clean_tags(values["tags"])
        if "hr_contacts" in values:
            job.hr_contacts_json = [
                HRContact.model_validate(item).model_dump() for item in values["hr_contacts"] or []
            ]
        if "last_working_day" in values:
            job.last_working_day = coerce_datetime(values["last_working_day"])


def _stages(items: list[Any]) -> list[InterviewStage]:
    return [InterviewStage.model_validate(item) for item in items]


def _without_nulls(values: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    """An explicit null on a NOT NULL field means "leave unchanged"."""
    return {key: value for key, value in values.items() if not (key in keys and value is None)}
