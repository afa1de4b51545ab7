from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from jobtrack.api.schemas import JobCreateRequest, JobUpdateRequest
from jobtrack.core.reconciliation import plan_stage_list_update
from jobtrack.types import ColumnRef, InterviewStage


def test_number_sentinels_normalize_to_none() -> None:
    payload = JobUpdateRequest.model_validate({"ctc_min": "", "ctc_max": float("nan"), "offered_ctc": "90000"})
    assert payload.ctc_min is None
    assert payload.ctc_max is None
    assert payload.offered_ctc == 90000.0
    assert {"ctc_min", "ctc_max"} <= payload.model_fields_set


def test_ctc_range_must_be_ordered() -> None:
    with pytest.raises(ValidationError):
        JobUpdateRequest(ctc_min=200, ctc_max=100)


def test_job_url_must_be_http() -> None:
    with pytest.raises(ValidationError):
        JobCreateRequest(company_name="Acme", role="SRE", location="Remote", job_url="ftp://acme")
    assert JobCreateRequest(company_name="Acme", role="SRE", location="Remote", job_url="").job_url == ""


def test_date_only_strings_are_accepted() -> None:
    payload = JobUpdateRequest(applied_date="2024-01-10")
    assert payload.applied_date is not None
    assert payload.applied_date.isoformat() == "2024-01-10T00:00:00+00:00"


def test_required_fields_on_create() -> None:
    with pytest.raises(ValidationError):
        JobCreateRequest(company_name="", role="SRE", location="Remote")


def test_naive_stage_datetimes_are_read_as_utc() -> None:
    stage = InterviewStage(stage_id=2, date="2024-01-15T10:00:00")
    assert stage.date == datetime(2024, 1, 15, 10, 0, tzinfo=UTC)
    assert stage.date.utcoffset() == timedelta(0)


def test_furthest_stage_date_enters_history_as_utc() -> None:
    columns = {1: ColumnRef(id=1, title="Applied"), 2: ColumnRef(id=2, title="Onsite")}
    plan = plan_stage_list_update(
        current_column_id=1,
        stage_history=[],
        submitted_stages=[
            InterviewStage(stage_id=1, order=0),
            InterviewStage.model_validate({"stage_id": 2, "order": 1, "date": "2024-01-15T10:00:00"}),
        ],
        columns=columns,
        applied_date=None,
        applied_date_changed=False,
        now=datetime(2024, 3, 1, tzinfo=UTC),
    )
    assert plan.stage_history[0].entered_date.tzinfo is not None
    assert plan.stage_history[0].entered_date == datetime(2024, 1, 15, 10, 0, tzinfo=UTC)
