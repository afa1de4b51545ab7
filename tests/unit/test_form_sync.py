from datetime import UTC, datetime

import pytest

from jobtrack.core.form_sync import AppliedDateLink
from jobtrack.types import ColumnRef, InterviewStage

COLUMNS = {1: ColumnRef(id=1, title="Applied"), 2: ColumnRef(id=2, title="Onsite")}
JAN_10 = datetime(2024, 1, 10, tzinfo=UTC)
JAN_12 = datetime(2024, 1, 12, tzinfo=UTC)


def _form(applied_date=None) -> AppliedDateLink:
    stages = [
        InterviewStage(stage_id=1, stage_name="Applied", date=JAN_10, order=0),
        InterviewStage(stage_id=2, stage_name="Onsite", order=1),
    ]
    return AppliedDateLink(stages, COLUMNS, applied_date)


def test_stage_date_seeds_applied_date_on_load() -> None:
    form = _form(applied_date=datetime(2023, 12, 31, tzinfo=UTC))
    assert form.applied_date == JAN_10


def test_applied_date_edit_updates_stage_once() -> None:
    form = _form()
    form.set_applied_date("2024-01-12")

    assert form.applied_date == JAN_12
    assert form.stages[0].date == JAN_12
    assert form.suppressed == 1


def test_stage_date_edit_updates_applied_date_once() -> None:
    form = _form()
    form.set_stage_date(1, JAN_12)

    assert form.applied_date == JAN_12
    assert form.suppressed == 1


def test_other_stage_edits_do_not_touch_applied_date() -> None:
    form = _form()
    form.set_stage_date(2, JAN_12)

    assert form.applied_date == JAN_10
    assert form.stages[1].date == JAN_12
    assert form.suppressed == 0


def test_unknown_stage_raises() -> None:
    with pytest.raises(KeyError):
        _form().set_stage_date(99, JAN_12)


def test_as_update_carries_both_fields() -> None:
    form = _form()
    form.set_applied_date(JAN_12)
    update = form.as_update()

    assert update["applied_date"] == JAN_12
    assert update["interview_stages"][0]["date"] == JAN_12
