"""ORM models for persistence."""
from __future__ import annotations

from sqlalchemy import Column, String, DateTime, Float

from .db import Base


class PostureSessionRecord(Base):
    __tablename__ = "posture_session"

    id = Column(String(36), primary_key=True)
    started_at_utc = Column(DateTime, nullable=False, index=True)
    ended_at_utc = Column(DateTime, nullable=False)
    poor_posture_sec = Column(Float, default=0.0)
    average_pitch = Column(Float, default=0.0)
    min_pitch = Column(Float, default=0.0)
    max_pitch = Column(Float, default=0.0)
