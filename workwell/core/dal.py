"""Data access layer utilities."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .models import PostureSessionRecord


def add_posture_session(
    db: Session,
    *,
    id: str,
    started_at_utc: datetime,
    ended_at_utc: datetime,
    poor_posture_sec: float,
    average_pitch: float,
    min_pitch: float,
    max_pitch: float,
) -> PostureSessionRecord:
    row = PostureSessionRecord(
        id=id,
        started_at_utc=started_at_utc,
        ended_at_utc=ended_at_utc,
        poor_posture_sec=poor_posture_sec,
        average_pitch=average_pitch,
        min_pitch=min_pitch,
        max_pitch=max_pitch,
    )
    db.add(row)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)
    return row


def get_posture_session(db: Session, session_id: str) -> Optional[PostureSessionRecord]:
    return db.query(PostureSessionRecord).filter(PostureSessionRecord.id == session_id).first()


def list_posture_sessions(db: Session, limit: Optional[int] = None) -> list[PostureSessionRecord]:
    q = db.query(PostureSessionRecord).order_by(PostureSessionRecord.started_at_utc.desc())
    if limit is not None:
        q = q.limit(limit)
    return list(q)


def delete_posture_session(db: Session, session_id: str) -> bool:
    """Delete one session; return whether a row was removed."""
    row = get_posture_session(db, session_id)
    if row is None:
        return False
    db.delete(row)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    return True


def delete_all_posture_sessions(db: Session) -> int:
    count = db.query(PostureSessionRecord).delete()
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    return count
