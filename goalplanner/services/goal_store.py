"""Persistence helpers for Goal aggregates."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from goalplanner.core.errors import StoreUnavailable
from goalplanner.db.models.goal import Goal

logger = logging.getLogger(__name__)

MERGEABLE_FIELDS = frozenset({"roadmap", "deadline", "hours_per_day"})


def insert_goal(db: Session, goal: Goal) -> Goal:
    db.add(goal)
    return _commit(db, goal)


def save_goal(db: Session, goal: Goal) -> Goal:
    db.add(goal)
    return _commit(db, goal)


def find_goal(db: Session, goal_id: UUID) -> Optional[Goal]:
    """Look a goal up by id alone, ignoring ownership.

    Part of the store interface for maintenance and tests; request handlers
    must use ``find_owned_goal`` so callers only ever see their own goals.
    """
    with _reading(db, f"load goal {goal_id}"):
        return db.get(Goal, goal_id)


def find_owned_goal(db: Session, owner_id: UUID, goal_id: UUID) -> Optional[Goal]:
    with _reading(db, f"load goal {goal_id}"):
        return db.query(Goal).filter(Goal.id == goal_id, Goal.user_id == owner_id).one_or_none()


def list_owned_goals(db: Session, owner_id: UUID) -> List[Goal]:
    with _reading(db, f"list goals for user {owner_id}"):
        return db.query(Goal).filter(Goal.user_id == owner_id).order_by(asc(Goal.created_at)).all()


def delete_owned_goal(db: Session, owner_id: UUID, goal_id: UUID) -> Optional[Goal]:
    goal = find_owned_goal(db, owner_id, goal_id)
    if goal is None:
        return None
    db.delete(goal)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to delete goal %s", goal_id)
        raise StoreUnavailable("Failed to delete goal") from exc
    return goal


def merge_goal_fields(db: Session, owner_id: UUID, goal_id: UUID, fields: Dict[str, Any]) -> Optional[Goal]:
    """Overwrite whitelisted columns on an owned goal; unknown keys are a programming error."""
    unknown = set(fields) - MERGEABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be merged: {sorted(unknown)}")

    goal = find_owned_goal(db, owner_id, goal_id)
    if goal is None:
        return None
    for name, value in fields.items():
        setattr(goal, name, value)
    return save_goal(db, goal)


def _commit(db: Session, goal: Goal) -> Goal:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to persist goal %s", goal.id)
        raise StoreUnavailable("Failed to save goal") from exc
    db.refresh(goal)
    return goal


@contextmanager
def _reading(db: Session, action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Goal store failed to %s", action)
        raise StoreUnavailable("Goal store unavailable") from exc
