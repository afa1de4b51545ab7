from __future__ import annotations

import json

import typer
import uvicorn

from jobtrack.api.app import create_app
from jobtrack.auth.tokens import create_access_token
from jobtrack.config import get_settings
from jobtrack.core.board import BoardService
from jobtrack.core.errors import BoardValidationError, NotFoundError
from jobtrack.core.form_sync import AppliedDateLink
from jobtrack.db.init import init_database
from jobtrack.db.repositories import Repository, interview_stages_of
from jobtrack.db.session import SessionLocal
from jobtrack.logging_config import configure_logging

app = typer.Typer(help="jobtrack CLI")
user_app = typer.Typer(help="Manage users")
columns_app = typer.Typer(help="Board columns")
jobs_app = typer.Typer(help="Job applications")

app.add_typer(user_app, name="user")
app.add_typer(columns_app, name="columns")
app.add_typer(jobs_app, name="jobs")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _echo(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _require_user(repo: Repository, email: str):
    user = repo.get_user_by_email(email)
    if not user:
        raise typer.BadParameter(f"user {email} not found")
    return user


@app.command("init")
def init_cmd() -> None:
    """Initialize database and data directories."""
    configure_logging()
    result = init_database()
    _echo({"ok": True, **result})


@user_app.command("create")
def user_create(
    email: str = typer.Option(..., "--email"),
    name: str = typer.Option("", "--name"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        service = BoardService(db)
        if service.repo.get_user_by_email(email):
            raise typer.BadParameter(f"user {email} already exists")
        user = service.repo.create_user(name=name or email, email=email)
        seeded = service.ensure_board(user.id)
        _echo({"id": user.id, "email": user.email, "columns": seeded})


@user_app.command("token")
def user_token(email: str = typer.Option(..., "--email")) -> None:
    """Issue a bearer token for local API use."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        user = _require_user(Repository(db), email)
        _echo({"user_id": user.id, "token": create_access_token(user.id)})


@columns_app.command("list")
def columns_list(email: str = typer.Option(..., "--email")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        user = _require_user(repo, email)
        _echo(
            [
                {"id": column.id, "title": column.title, "order": column.order, "role": column.role}
                for column in repo.list_columns(user.id)
            ]
        )


@jobs_app.command("list")
def jobs_list(email: str = typer.Option(..., "--email")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        service = BoardService(db)
        user = _require_user(service.repo, email)
        _echo(
            [
                {
                    "id": job.id,
                    "company_name": job.company_name,
                    "role": job.role,
                    "column_id": job.column_id,
                    "order": job.order,
                }
                for job in service.repo.list_jobs(user.id)
            ]
        )


@jobs_app.command("move")
def jobs_move(
    email: str = typer.Option(..., "--email"),
    job_id: int = typer.Option(..., "--job-id"),
    column_id: int = typer.Option(..., "--column-id"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        service = BoardService(db)
        user = _require_user(service.repo, email)
        try:
            job = service.move_job(user.id, job_id, column_id)
        except NotFoundError as exc:
            raise typer.BadParameter(str(exc)) from exc
        _echo(service.serialize_job(job))


@jobs_app.command("set-applied-date")
def jobs_set_applied_date(
    email: str = typer.Option(..., "--email"),
    job_id: int = typer.Option(..., "--job-id"),
    date: str = typer.Option(..., "--date", help="ISO date, e.g. 2024-01-10"),
) -> None:
    """Edit the applied date the way the job form does, keeping the Applied stage in step."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        service = BoardService(db)
        user = _require_user(service.repo, email)
        job = service.repo.get_job(user.id, job_id)
        if not job:
            raise typer.BadParameter(f"job {job_id} not found")

        form = AppliedDateLink(interview_stages_of(job), service.repo.column_refs(user.id), job.applied_date)
        form.set_applied_date(date)
        try:
            job = service.update_job(user.id, job_id, form.as_update())
        except (NotFoundError, BoardValidationError) as exc:
            raise typer.BadParameter(str(exc)) from exc
        _echo(service.serialize_job(job))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    configure_logging(log_level)
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
