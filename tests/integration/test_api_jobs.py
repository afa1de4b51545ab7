from datetime import UTC, datetime


def _create(client, board_user, **overrides) -> dict:
    payload = {
        "company_name": "Acme",
        "role": "Platform Engineer",
        "location": "Berlin",
        "column_id": board_user["columns"]["Applied"],
    }
    payload.update(overrides)
    response = client.post("/api/jobs", json=payload, headers=board_user["headers"])
    assert response.status_code == 201, response.text
    return response.json()


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_requests_without_token_are_rejected(client) -> None:
    response = client.get("/api/jobs")
    assert response.status_code == 401
    assert response.json()["detail"] == "No token provided"

    response = client.get("/api/jobs", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


def test_default_columns_are_listed_in_order(client, board_user) -> None:
    response = client.get("/api/columns", headers=board_user["headers"])
    assert response.status_code == 200
    body = response.json()
    assert [column["title"] for column in body] == ["Applied", "Recruiter Call", "OA", "Phone Screen", "Onsite", "Offer"]
    assert body[0]["role"] == "applied"
    assert {column["role"] for column in body[1:]} == {"generic"}


def test_create_job_seeds_history_and_stage(client, board_user) -> None:
    job = _create(client, board_user, applied_date="2024-01-10", tags=["remote", "remote"])

    assert job["order"] == 0
    assert job["tags"] == ["remote"]
    assert _parse(job["applied_date"]) == datetime(2024, 1, 10, tzinfo=UTC)
    assert len(job["stage_history"]) == 1
    assert _parse(job["stage_history"][0]["entered_date"]) == datetime(2024, 1, 10, tzinfo=UTC)
    assert job["interview_stages"][0]["stage_name"] == "Applied"
    assert job["interview_stages"][0]["status"] == "Pending"


def test_blank_and_nan_inputs_persist_as_absent(client, board_user) -> None:
    job = _create(client, board_user, ctc_min="", job_url="")
    assert job["ctc_min"] is None
    assert job["job_url"] is None

    response = client.put(
        f"/api/jobs/{job['id']}",
        content='{"ctc_max": NaN, "offered_ctc": 120000}',
        headers={**board_user["headers"], "Content-Type": "application/json"},
    )
    assert response.status_code == 200, response.text
    assert response.json()["ctc_max"] is None
    assert response.json()["offered_ctc"] == 120000

    fetched = client.get(f"/api/jobs/{job['id']}", headers=board_user["headers"]).json()
    assert fetched["ctc_max"] is None


def test_invalid_ctc_range_is_unprocessable(client, board_user) -> None:
    response = client.post(
        "/api/jobs",
        json={"company_name": "Acme", "role": "SRE", "location": "Remote", "column_id": 1, "ctc_min": 9, "ctc_max": 1},
        headers=board_user["headers"],
    )
    assert response.status_code == 422


def test_move_endpoint_appends_to_target_column(client, board_user) -> None:
    onsite = board_user["columns"]["Onsite"]
    first = _create(client, board_user)
    second = _create(client, board_user)

    for job in (first, second):
        response = client.patch(f"/api/jobs/{job['id']}/move", json={"column_id": onsite}, headers=board_user["headers"])
        assert response.status_code == 200

    moved = response.json()
    assert moved["column_id"] == onsite
    assert moved["order"] == 1
    assert [entry["column_title"] for entry in moved["stage_history"]] == ["Applied", "Onsite"]
    assert [stage["stage_name"] for stage in moved["interview_stages"]] == ["Applied", "Onsite"]


def test_move_to_unknown_column_is_not_found(client, board_user) -> None:
    job = _create(client, board_user)
    response = client.patch(f"/api/jobs/{job['id']}/move", json={"column_id": 999}, headers=board_user["headers"])
    assert response.status_code == 404
    assert response.json()["detail"] == "Column not found"


def test_stage_update_moves_job_to_furthest_stage(client, board_user) -> None:
    applied = board_user["columns"]["Applied"]
    recruiter = board_user["columns"]["Recruiter Call"]
    job = _create(
        client,
        board_user,
        column_id=None,
        applied_date="2024-01-10",
        interview_stages=[{"stage_id": applied, "stage_name": "Applied", "order": 0, "date": "2024-01-10"}],
    )

    response = client.put(
        f"/api/jobs/{job['id']}",
        json={
            "interview_stages": [
                {"stage_id": applied, "stage_name": "Applied", "order": 0, "date": "2024-01-10"},
                {"stage_id": recruiter, "stage_name": "Recruiter Call", "order": 1, "date": "2024-01-15"},
            ]
        },
        headers=board_user["headers"],
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["column_id"] == recruiter
    assert [(entry["column_id"], _parse(entry["entered_date"])) for entry in body["stage_history"]] == [
        (applied, datetime(2024, 1, 10, tzinfo=UTC)),
        (recruiter, datetime(2024, 1, 15, tzinfo=UTC)),
    ]


def test_stage_update_with_duplicate_stage_is_bad_request(client, board_user) -> None:
    applied = board_user["columns"]["Applied"]
    job = _create(client, board_user)
    response = client.put(
        f"/api/jobs/{job['id']}",
        json={"interview_stages": [{"stage_id": applied, "order": 0}, {"stage_id": applied, "order": 1}]},
        headers=board_user["headers"],
    )
    assert response.status_code == 400


def test_reorder_endpoint(client, board_user) -> None:
    jobs = [_create(client, board_user) for _ in range(3)]
    ids = [job["id"] for job in reversed(jobs)]

    response = client.post("/api/jobs/reorder", json={"job_ids": ids}, headers=board_user["headers"])
    assert response.status_code == 200
    assert response.json()["success"] is True

    listed = client.get("/api/jobs", headers=board_user["headers"]).json()
    assert [job["id"] for job in listed] == ids


def test_reorder_mixed_columns_is_bad_request(client, board_user) -> None:
    first = _create(client, board_user)
    other = _create(client, board_user, column_id=board_user["columns"]["OA"])

    response = client.post(
        "/api/jobs/reorder",
        json={"job_ids": [other["id"], first["id"]]},
        headers=board_user["headers"],
    )
    assert response.status_code == 400


def test_delete_job(client, board_user) -> None:
    job = _create(client, board_user)
    response = client.delete(f"/api/jobs/{job['id']}", headers=board_user["headers"])
    assert response.status_code == 200
    assert client.get(f"/api/jobs/{job['id']}", headers=board_user["headers"]).status_code == 404


def test_column_crud(client, board_user) -> None:
    created = client.post("/api/columns", json={"title": "Rejected", "color": "#f00"}, headers=board_user["headers"])
    assert created.status_code == 201
    column = created.json()
    assert column["order"] == 6
    assert column["role"] == "generic"

    renamed = client.put(f"/api/columns/{column['id']}", json={"title": "Closed"}, headers=board_user["headers"])
    assert renamed.json()["title"] == "Closed"

    _create(client, board_user, column_id=column["id"])
    deleted = client.delete(f"/api/columns/{column['id']}", headers=board_user["headers"])
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Column deleted with 1 jobs"
    assert client.delete(f"/api/columns/{column['id']}", headers=board_user["headers"]).status_code == 404


def test_health_reports_database(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_null_for_required_fields_leaves_them_unchanged(client, board_user) -> None:
    job = _create(client, board_user)

    response = client.put(
        f"/api/jobs/{job['id']}",
        json={"company_name": None, "role": None, "location": None, "notes_markdown": "call back"},
        headers=board_user["headers"],
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert (body["company_name"], body["role"], body["location"]) == ("Acme", "Platform Engineer", "Berlin")
    assert body["notes_markdown"] == "call back"

    column_id = board_user["columns"]["OA"]
    response = client.put(
        f"/api/columns/{column_id}",
        json={"title": None, "order": None, "color": "#0af"},
        headers=board_user["headers"],
    )
    assert response.status_code == 200, response.text
    assert response.json()["title"] == "OA"
    assert response.json()["order"] == 2
    assert response.json()["color"] == "#0af"
