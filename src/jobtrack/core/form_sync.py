from __future__ import annotations

from datetime import datetime

from jobtrack.types import APPLIED_TITLE, ColumnRef, InterviewStage, coerce_datetime


class AppliedDateLink:
    """Job-form state keeping the Applied Date field and the Applied stage's date in step.

    Each edit propagates to the other field once. ``_syncing`` is held for the
    duration of that single propagation so the mirrored write does not bounce
    back. The flag belongs to the form instance and is released before the
    setter returns.
    """

    def __init__(
        self,
        stages: list[InterviewStage],
        columns: dict[int, ColumnRef],
        applied_date: datetime | None = None,
    ):
        self.stages = [stage.model_copy() for stage in stages]
        self.columns = columns
        self.applied_date = coerce_datetime(applied_date)
        self.suppressed = 0
        self._syncing = False

        stage = self._applied_stage()
        if stage is not None and stage.date is not None:
            self.applied_date = stage.date

    def set_applied_date(self, value: datetime | str | None) -> None:
        self.applied_date = coerce_datetime(value)
        if self._syncing:
            self.suppressed += 1
            return
        self._syncing = True
        try:
            index = self._applied_index()
            if index is not None:
                self.set_stage_date(self.stages[index].stage_id, self.applied_date)
        finally:
            self._syncing = False

    def set_stage_date(self, stage_id: int, value: datetime | str | None) -> None:
        date = coerce_datetime(value)
        for index, stage in enumerate(self.stages):
            if stage.stage_id == stage_id:
                self.stages[index] = stage.model_copy(update={"date": date})
                break
        else:
            raise KeyError(stage_id)

        if self._syncing:
            self.suppressed += 1
            return
        if not self._is_applied(stage_id):
            return
        self._syncing = True
        try:
            self.set_applied_date(date)
        finally:
            self._syncing = False

    def as_update(self) -> dict[str, object]:
        return {
            "applied_date": self.applied_date,
            "interview_stages": [stage.model_dump() for stage in self.stages],
        }

    def _is_applied(self, stage_id: int) -> bool:
        column = self.columns.get(stage_id)
        if column is not None:
            return column.is_applied
        stage = next(stage for stage in self.stages if stage.stage_id == stage_id)
        return stage.stage_name.strip().lower() == APPLIED_TITLE

    def _applied_index(self) -> int | None:
        for index, stage in enumerate(self.stages):
            if self._is_applied(stage.stage_id):
                return index
        return None

    def _applied_stage(self) -> InterviewStage | None:
        index = self._applied_index()
        return None if index is None else self.stages[index]
