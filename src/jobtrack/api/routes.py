from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from jobtrack.api.deps import get_current_user, get_db
from jobtrack.api.schemas import (
    ColumnCreateRequest,
    ColumnResponse,
    ColumnUpdateRequest,
    InterviewCreateRequest,
    InterviewResponse,
    InterviewUpdateRequest,
    JobCreateRequest,
    JobMoveRequest,
    JobReorderRequest,
    JobResponse,
    JobUpdateRequest,
    ResumeResponse,
    SuccessResponse,
)
from jobtrack.core.board import BoardService
from jobtrack.core.errors import BoardValidationError, NotFoundError
from jobtrack.core.resume_store import ResumeStore
from jobtrack.db.models import User
from jobtrack.db.repositories import Repository
from jobtrack.types import coerce_datetime

router = APIRouter(prefix="/api", tags=["api"])


@router.get("/columns", response_model=list[ColumnResponse])
def list_columns(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[ColumnResponse]:
    rows = Repository(db).list_columns(user.id)
    return [ColumnResponse.model_validate(row) for row in rows]


@router.post("/columns", response_model=ColumnResponse, status_code=201)
def create_column(
    payload: ColumnCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ColumnResponse:
    column = BoardService(db).create_column(
        user.id,
        title=payload.title,
        order=payload.order,
        color=payload.color,
        role=payload.role,
    )
    return ColumnResponse.model_validate(column)


@router.put("/columns/{column_id}", response_model=ColumnResponse)
def update_column(
    column_id: int,
    payload: ColumnUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ColumnResponse:
    try:
        column = BoardService(db).update_column(user.id, column_id, payload.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ColumnResponse.model_validate(column)


@router.delete("/columns/{column_id}", response_model=SuccessResponse)
def delete_column(
    column_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    try:
        removed = BoardService(db).delete_column(user.id, column_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return SuccessResponse(message=f"Column deleted with {removed} jobs")


@router.get("/jobs", response_model=list[JobResponse])
def list_jobs(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[JobResponse]:
    service = BoardService(db)
    return [JobResponse.model_validate(service.serialize_job(job)) for job in service.repo.list_jobs(user.id)]


@router.post("/jobs", response_model=JobResponse, status_code=201)
def create_job(
    payload: JobCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> JobResponse:
    service = BoardService(db)
    try:
        job = service.create_job(user.id, payload.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except BoardValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JobResponse.model_validate(service.serialize_job(job))


@router.post("/jobs/reorder", response_model=SuccessResponse)
def reorder_jobs(
    payload: JobReorderRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    try:
        BoardService(db).reorder_jobs(user.id, payload.job_ids)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except BoardValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return SuccessResponse()


@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(job_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> JobResponse:
    service = BoardService(db)
    job = service.repo.get_job(user.id, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse.model_validate(service.serialize_job(job))


@router.put("/jobs/{job_id}", response_model=JobResponse)
def update_job(
    job_id: int,
    payload: JobUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> JobResponse:
    service = BoardService(db)
    try:
        job = service.update_job(user.id, job_id, payload.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except BoardValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JobResponse.model_validate(service.serialize_job(job))


@router.patch("/jobs/{job_id}/move", response_model=JobResponse)
def move_job(
    job_id: int,
    payload: JobMoveRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> JobResponse:
    service = BoardService(db)
    try:
        job = service.move_job(user.id, job_id, payload.column_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return JobResponse.model_validate(service.serialize_job(job))


@router.delete("/jobs/{job_id}", response_model=SuccessResponse)
def delete_job(job_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> SuccessResponse:
    try:
        BoardService(db).delete_job(user.id, job_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return SuccessResponse(message="Job and all related interviews deleted")


@router.post("/interviews", response_model=InterviewResponse, status_code=201)
def create_interview(
    payload: InterviewCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> InterviewResponse:
    repo = Repository(db)
    if not repo.get_job(user.id, payload.job_id):
        raise HTTPException(status_code=404, detail="Job not found")

    values = payload.model_dump(exclude={"job_id"})
    for key in ("time", "end_time"):
        values[key] = values[key] or None
    interview = repo.create_interview(job_id=payload.job_id, values=values)
    return InterviewResponse.model_validate(interview)


@router.get("/interviews", response_model=list[InterviewResponse])
def list_interviews(
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[InterviewResponse]:
    try:
        window_start = _query_datetime(start)
        window_end = _query_datetime(end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    rows = Repository(db).list_user_interviews(user.id, start=window_start, end=window_end)
    return [InterviewResponse.model_validate(row) for row in rows]


@router.get("/interviews/jobs/{job_id}", response_model=list[InterviewResponse])
def list_job_interviews(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[InterviewResponse]:
    repo = Repository(db)
    if not repo.get_job(user.id, job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return [InterviewResponse.model_validate(row) for row in repo.list_job_interviews(job_id)]


@router.put("/interviews/{interview_id}", response_model=InterviewResponse)
def update_interview(
    interview_id: int,
    payload: InterviewUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> InterviewResponse:
    repo = Repository(db)
    interview = repo.get_interview(user.id, interview_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")

    values = payload.model_dump(exclude_unset=True)
    for key in ("stage", "date", "status"):
        if values.get(key) is None:
            values.pop(key, None)
    for key in ("time", "end_time"):
        if key in values:
            values[key] = values[key] or None
    return InterviewResponse.model_validate(repo.update_interview(interview, values))


@router.delete("/interviews/{interview_id}", response_model=SuccessResponse)
def delete_interview(
    interview_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    repo = Repository(db)
    interview = repo.get_interview(user.id, interview_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")
    repo.delete_interview(interview)
    return SuccessResponse(message="Interview deleted")


@router.post("/resumes/upload", response_model=ResumeResponse, status_code=201)
def upload_resume(
    file: UploadFile = File(...),
    name: str = Form(""),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ResumeResponse:
    store = ResumeStore()
    try:
        stored_name = store.save(file.filename or "", file.file)
    except BoardValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    resume = Repository(db).create_resume(
        user_id=user.id,
        name=name.strip() or file.filename or stored_name,
        file_url=stored_name,
    )
    return ResumeResponse.model_validate(resume)


@router.get("/resumes", response_model=list[ResumeResponse])
def list_resumes(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[ResumeResponse]:
    return [ResumeResponse.model_validate(row) for row in Repository(db).list_resumes(user.id)]


@router.get("/resumes/{resume_id}/file")
def download_resume(
    resume_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FileResponse:
    resume = Repository(db).get_resume(user.id, resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")

    path = ResumeStore().path_for(resume.file_url)
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Resume file not found")
    download_name = resume.name if resume.name.endswith(path.suffix) else f"{resume.name}{path.suffix}"
    return FileResponse(path, filename=download_name)


@router.delete("/resumes/{resume_id}", response_model=SuccessResponse)
def delete_resume(
    resume_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    repo = Repository(db)
    resume = repo.get_resume(user.id, resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")

    ResumeStore().delete(resume.file_url)
    repo.delete_resume(resume)
    return SuccessResponse(message="Resume deleted")


def _query_datetime(value: str | None) -> datetime | None:
    parsed = coerce_datetime(value)
    if parsed is None or isinstance(parsed, datetime):
        return parsed
    return coerce_datetime(datetime.fromisoformat(parsed))
