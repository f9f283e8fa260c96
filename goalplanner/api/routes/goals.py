"""Goal and roadmap API routes."""
from __future__ import annotations

from typing import Any, Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from goalplanner.api.deps import get_current_user_id
from goalplanner.api.schemas.auth import MessageResponse
from goalplanner.api.schemas.goal import (
    GoalCreateRequest,
    GoalResponse,
    GoalUpdateRequest,
    RoadmapEntryPayload,
)
from goalplanner.db.deps import get_db
from goalplanner.db.models.goal import Goal
from goalplanner.services import goal_service
from goalplanner.services.text_generation import TextGenerator, get_text_generator

router = APIRouter(prefix="/api/goals", tags=["goals"])


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal_endpoint(
    payload: GoalCreateRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator: TextGenerator = Depends(get_text_generator),
) -> GoalResponse:
    """Generate a roadmap for a new goal and store both together."""
    goal = goal_service.create_goal(
        db,
        user_id,
        title=payload.title,
        description=payload.description,
        deadline=payload.deadline,
        hours_per_day=payload.hours_per_day,
        generator=generator,
        request_id=_request_id(http_request),
    )
    return _serialize_goal(goal)


@router.get("", response_model=List[GoalResponse])
def list_goals_endpoint(
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> List[GoalResponse]:
    goals = goal_service.list_goals(db, user_id, request_id=_request_id(http_request))
    return [_serialize_goal(goal) for goal in goals]


@router.put("/{goal_id}/task/{task_id}", response_model=GoalResponse)
def toggle_task_endpoint(
    goal_id: UUID,
    task_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalResponse:
    """Flip the completed flag of one roadmap entry."""
    goal = goal_service.toggle_task(db, user_id, goal_id, task_id, request_id=_request_id(http_request))
    return _serialize_goal(goal)


@router.put("/{goal_id}", response_model=GoalResponse)
def replace_goal_endpoint(
    goal_id: UUID,
    payload: GoalUpdateRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalResponse:
    """Replace the roadmap (skip/reorder edits), deadline, or daily hours."""
    fields: Dict[str, Any] = payload.model_dump(exclude_unset=True)
    goal = goal_service.replace_goal_fields(db, user_id, goal_id, fields, request_id=_request_id(http_request))
    return _serialize_goal(goal)


@router.delete("/{goal_id}", response_model=MessageResponse)
def delete_goal_endpoint(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    goal_service.delete_goal(db, user_id, goal_id, request_id=_request_id(http_request))
    return MessageResponse(message="Goal deleted successfully")


def _request_id(http_request: Request) -> str | None:
    return getattr(http_request.state, "request_id", None)


def _serialize_goal(goal: Goal) -> GoalResponse:
    return GoalResponse(
        id=goal.id,
        user_id=goal.user_id,
        title=goal.title,
        description=goal.description or "",
        deadline=goal.deadline,
        hours_per_day=goal.hours_per_day,
        adjustment_message=goal.adjustment_message,
        roadmap=[RoadmapEntryPayload(**entry) for entry in goal.roadmap or []],
        created_at=goal.created_at,
        updated_at=goal.updated_at,
    )
