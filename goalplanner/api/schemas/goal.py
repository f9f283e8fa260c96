"""Schemas for goal and roadmap endpoints."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class GoalCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    deadline: date
    hours_per_day: float = Field(..., gt=0, le=24)

    @field_validator("title")
    @classmethod
    def trim_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("title must not be blank")
        return cleaned

    @field_validator("description")
    @classmethod
    def trim_description(cls, value: str) -> str:
        return value.strip()


class RoadmapEntryPayload(BaseModel):
    id: UUID
    day: int
    task: str
    completed: bool = False


class RoadmapEntryInput(BaseModel):
    """A roadmap entry supplied by the client when editing; ``id`` may be omitted for new entries."""

    model_config = ConfigDict(extra="forbid")

    id: Optional[UUID] = None
    day: int
    task: str = Field(..., max_length=2000)
    completed: bool = False


class GoalUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    roadmap: Optional[List[RoadmapEntryInput]] = None
    deadline: Optional[date] = None
    hours_per_day: Optional[float] = Field(default=None, gt=0, le=24)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "GoalUpdateRequest":
        nulled = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulled:
            raise ValueError(f"fields cannot be null: {', '.join(nulled)}")
        return self


class GoalResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    description: str
    deadline: Optional[date]
    hours_per_day: Optional[float]
    adjustment_message: Optional[str]
    roadmap: List[RoadmapEntryPayload]
    created_at: datetime
    updated_at: datetime
