"""Session storage collaborator.

``SqlSessionStore`` keeps finalized sessions in SQLite through the DAL. Each
call opens and closes its own DB session, as background callers have no
request scope to borrow one from.
"""
from __future__ import annotations

from typing import List, Protocol

from sqlalchemy.orm import sessionmaker

from workwell.core.dal import (
    add_posture_session,
    delete_all_posture_sessions,
    delete_posture_session,
    list_posture_sessions,
)

from .session import PostureSession, as_utc


class SessionStore(Protocol):
    def append(self, session: PostureSession) -> None: ...

    def list_all(self) -> List[PostureSession]: ...

    def delete(self, session_id: str) -> bool: ...

    def delete_all(self) -> int: ...


class SqlSessionStore:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def append(self, session: PostureSession) -> None:
        db = self._session_factory()
        try:
            add_posture_session(
                db,
                id=session.id,
                # SQLite has no tz support: store naive UTC
                started_at_utc=as_utc(session.start_time).replace(tzinfo=None),
                ended_at_utc=as_utc(session.end_time).replace(tzinfo=None),
                poor_posture_sec=session.poor_posture_duration,
                average_pitch=session.average_pitch,
                min_pitch=session.min_pitch,
                max_pitch=session.max_pitch,
            )
        finally:
            db.close()

    def list_all(self) -> List[PostureSession]:
        """Return every session, newest first."""
        db = self._session_factory()
        try:
            return [PostureSession.from_record(row) for row in list_posture_sessions(db)]
        finally:
            db.close()

    def delete(self, session_id: str) -> bool:
        db = self._session_factory()
        try:
            return delete_posture_session(db, session_id)
        finally:
            db.close()

    def delete_all(self) -> int:
        db = self._session_factory()
        try:
            return delete_all_posture_sessions(db)
        finally:
            db.close()
