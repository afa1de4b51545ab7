from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from jobtrack.config import get_settings
from jobtrack.db.models import Column
from jobtrack.db.repositories import infer_column_role


def seed_default_columns(session: Session, user_id: int, titles: list[str] | None = None) -> int:
    """Give a fresh board its starting pipeline; boards that already have columns are left alone."""
    existing = session.scalar(select(Column.id).where(Column.user_id == user_id).limit(1))
    if existing is not None:
        return 0

    inserted = 0
    for order, title in enumerate(titles if titles is not None else get_settings().default_column_titles):
        session.add(Column(user_id=user_id, title=title, order=order, role=infer_column_role(title)))
        inserted += 1

    session.commit()
    return inserted
