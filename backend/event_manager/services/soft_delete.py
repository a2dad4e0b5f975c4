"""Soft-delete helpers shared by users and events"""
from datetime import datetime, timezone
from typing import NamedTuple, TypeVar
from sqlalchemy.orm import Query, Session

T = TypeVar("T")


class RestoreResult(NamedTuple):
    entity: object
    # False when the entity was already active and nothing changed
    restored: bool


def active_only(query: Query, model) -> Query:
    return query.filter(model.deleted_at.is_(None))


def mark_deleted(db: Session, entity: T) -> datetime:
    """Stamp deleted_at with the current time and return it"""
    deleted_at = datetime.now(timezone.utc)
    entity.deleted_at = deleted_at
    db.commit()
    db.refresh(entity)
    return deleted_at


def restore(db: Session, entity: T) -> RestoreResult:
    if entity.deleted_at is None:
        return RestoreResult(entity, False)
    entity.deleted_at = None
    db.commit()
    db.refresh(entity)
    return RestoreResult(entity, True)
