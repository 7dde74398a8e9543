from sqlalchemy import select
from sqlalchemy.orm import Session

from billing_hooks.context import get_correlation_id
from billing_hooks.models.activity import ActivityLog


def log_activity(
    db: Session,
    description: str,
    user_id: int = 0,
    username: str | None = None,
) -> ActivityLog:
    entry = ActivityLog(
        description=description,
        user_id=user_id,
        username=username,
        correlation_id=get_correlation_id(),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def list_activity(db: Session, limit: int = 100) -> list[ActivityLog]:
    stmt = select(ActivityLog).order_by(ActivityLog.id.desc()).limit(limit)
    return list(db.scalars(stmt).all())
