"""Stage bookkeeping for jobs on the board.

A job records where it is in three places: ``column_id`` (the board column it
sits in), ``stage_history`` (when it last entered each column) and
``interview_stages`` (the progress stepper edited on the job form). The helpers
here compute the new values of those fields for a column move or a form edit.
They never touch the database; callers load the job, call a planner and persist
the outcome.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime

from jobtrack.core.errors import BoardValidationError, NotFoundError
from jobtrack.types import ColumnRef, InterviewStage, StageHistoryEntry


def stage_entry_date(
    column: ColumnRef,
    applied_date: datetime | None,
    *,
    now: datetime,
    fallback: datetime | None = None,
) -> datetime:
    """Date to stamp on a history entry when a job enters ``column``.

    Entering the Applied column reuses the job's applied date so the board and
    the Applied Date field agree.
    """
    if column.is_applied and applied_date is not None:
        return applied_date
    if fallback is not None:
        return fallback
    return now


def record_stage_entry(
    history: Iterable[StageHistoryEntry],
    column: ColumnRef,
    entered_date: datetime,
    *,
    refresh_title: bool = True,
) -> list[StageHistoryEntry]:
    """Update the entry for ``column`` in place, or append one if the job never visited it."""
    entries = [entry.model_copy() for entry in history]
    for index, entry in enumerate(entries):
        if entry.column_id != column.id:
            continue
        update: dict[str, object] = {"entered_date": entered_date}
        if refresh_title:
            update["column_title"] = column.title
        entries[index] = entry.model_copy(update=update)
        return entries

    entries.append(
        StageHistoryEntry(column_id=column.id, column_title=column.title, entered_date=entered_date)
    )
    return entries


def ensure_interview_stage(
    stages: Iterable[InterviewStage],
    column: ColumnRef,
    *,
    now: datetime,
) -> list[InterviewStage]:
    """Append a Pending stage for ``column`` at the end of the stepper unless one exists."""
    current = [stage.model_copy() for stage in stages]
    if any(stage.stage_id == column.id for stage in current):
        return current

    next_order = max((stage.order for stage in current), default=-1) + 1
    current.append(
        InterviewStage(
            stage_id=column.id,
            stage_name=column.title,
            status="Pending",
            date=now,
            order=next_order,
        )
    )
    return current


def renumber_stages(stages: Iterable[InterviewStage]) -> list[InterviewStage]:
    """Sort by submitted order (ties keep list position) and renumber to 0..N-1."""
    ordered = sorted(enumerate(stages), key=lambda item: (item[1].order, item[0]))
    return [stage.model_copy(update={"order": index}) for index, (_, stage) in enumerate(ordered)]


def furthest_stage(stages: Iterable[InterviewStage]) -> InterviewStage:
    current = list(stages)
    if not current:
        raise BoardValidationError("at least one interview stage is required")
    # max() keeps the first of equal orders; the last submitted one wins instead.
    best = current[0]
    for stage in current[1:]:
        if stage.order >= best.order:
            best = stage
    return best


def next_job_order(orders: Iterable[int]) -> int:
    return max(orders, default=-1) + 1


def validate_stage_list(
    stages: list[InterviewStage],
    columns: Mapping[int, ColumnRef],
) -> list[InterviewStage]:
    """Check a submitted stage list against the user's columns and normalize it."""
    if not stages:
        raise BoardValidationError("at least one interview stage is required")

    seen: set[int] = set()
    for stage in stages:
        if stage.stage_id in seen:
            raise BoardValidationError(f"duplicate interview stage for column {stage.stage_id}")
        seen.add(stage.stage_id)
        if stage.stage_id not in columns:
            raise NotFoundError("Column", stage.stage_id)

    named = [
        stage if stage.stage_name else stage.model_copy(update={"stage_name": columns[stage.stage_id].title})
        for stage in stages
    ]
    return renumber_stages(named)


@dataclass(slots=True)
class MovePlan:
    column_id: int
    stage_history: list[StageHistoryEntry]
    interview_stages: list[InterviewStage]
    order: int


def plan_move(
    *,
    stage_history: Iterable[StageHistoryEntry],
    interview_stages: Iterable[InterviewStage],
    applied_date: datetime | None,
    target: ColumnRef,
    sibling_orders: Iterable[int],
    now: datetime,
) -> MovePlan:
    """Drop a job into ``target``: stamp history, ensure a stepper entry, land at the bottom."""
    entered = stage_entry_date(target, applied_date, now=now)
    return MovePlan(
        column_id=target.id,
        stage_history=record_stage_entry(stage_history, target, entered),
        interview_stages=ensure_interview_stage(interview_stages, target, now=now),
        order=next_job_order(sibling_orders),
    )


@dataclass(slots=True)
class StageListPlan:
    column_id: int
    column_changed: bool
    stage_history: list[StageHistoryEntry]
    interview_stages: list[InterviewStage]


def plan_stage_list_update(
    *,
    current_column_id: int,
    stage_history: Iterable[StageHistoryEntry],
    submitted_stages: list[InterviewStage],
    columns: Mapping[int, ColumnRef],
    applied_date: datetime | None,
    applied_date_changed: bool,
    now: datetime,
) -> StageListPlan:
    """Reconcile a job after its interview stages were edited on the form.

    ``applied_date`` is the job's effective applied date after the edit. The
    current column becomes the furthest submitted stage.
    """
    stages = validate_stage_list(submitted_stages, columns)
    furthest = furthest_stage(stages)
    target = columns[furthest.stage_id]
    history = list(stage_history)

    if target.id != current_column_id:
        entered = stage_entry_date(target, applied_date, now=now, fallback=furthest.date)
        history = record_stage_entry(history, target, entered)
        return StageListPlan(
            column_id=target.id,
            column_changed=True,
            stage_history=history,
            interview_stages=stages,
        )

    history = sync_applied_history(
        history,
        target,
        applied_date=applied_date,
        applied_date_changed=applied_date_changed,
    )
    return StageListPlan(
        column_id=target.id,
        column_changed=False,
        stage_history=history,
        interview_stages=stages,
    )


def sync_applied_history(
    history: Iterable[StageHistoryEntry],
    current: ColumnRef,
    *,
    applied_date: datetime | None,
    applied_date_changed: bool,
) -> list[StageHistoryEntry]:
    """Carry an edited applied date onto the Applied column's history entry."""
    entries = list(history)
    if not applied_date_changed or applied_date is None or not current.is_applied:
        return entries
    return record_stage_entry(entries, current, applied_date, refresh_title=False)


def drop_column_stages(stages: Iterable[InterviewStage], column_id: int) -> list[InterviewStage] | None:
    """Remove a deleted column from a stepper; ``None`` when the column was never on it."""
    current = list(stages)
    kept = [stage for stage in current if stage.stage_id != column_id]
    if len(kept) == len(current):
        return None
    return renumber_stages(kept)
