"""Goal ORM model.

The roadmap is stored inside the goal row as an ordered JSON array of
``{"id", "day", "task", "completed"}`` objects so a goal and its plan are
always written together.
"""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Text, func
from sqlalchemy.dialects.postgresql import UUID

from goalplanner.db.base import Base
from goalplanner.db.types import JSONDocument


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (Index("ix_goals_user_id", "user_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    deadline = Column(Date, nullable=True)
    hours_per_day = Column(Float, nullable=True)
    adjustment_message = Column(Text, nullable=True)
    roadmap = Column(JSONDocument, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
