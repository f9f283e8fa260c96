"""Goal orchestration: creation via the roadmap generator, task toggles, edits, deletion."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from goalplanner.core.errors import NotFound, ValidationFailure
from goalplanner.db.models.goal import Goal
from goalplanner.observability.metrics import log_metric
from goalplanner.observability.tracing import annotate, trace
from goalplanner.services import goal_store
from goalplanner.services.roadmap_generator import generate_roadmap
from goalplanner.services.text_generation import TextGenerator

logger = logging.getLogger(__name__)


def create_goal(
    db: Session,
    owner_id: UUID,
    *,
    title: str,
    description: str,
    deadline: date,
    hours_per_day: float,
    generator: TextGenerator,
    today: Optional[date] = None,
    request_id: Optional[str] = None,
) -> Goal:
    """Generate a roadmap and persist the goal in one commit.

    The generator runs before anything is added to the session, so a
    ``GenerationFailure`` leaves the database untouched.
    """
    with trace("goal.create", metadata={"title_length": len(title)}, user_id=str(owner_id), request_id=request_id) as span:
        generated = generate_roadmap(
            generator,
            title=title,
            description=description,
            deadline=deadline,
            hours_per_day=hours_per_day,
            today=today,
            request_id=request_id,
        )
        goal = Goal(
            id=uuid4(),
            user_id=owner_id,
            title=title,
            description=description,
            deadline=deadline,
            hours_per_day=hours_per_day,
            adjustment_message=generated.adjustment_message,
            roadmap=[_new_entry(entry["day"], entry["task"]) for entry in generated.entries],
        )
        goal = goal_store.insert_goal(db, goal)
        annotate(span, goal_id=str(goal.id), entries=len(goal.roadmap))

    log_metric("goal.create.success", 1, metadata={"user_id": str(owner_id)})
    log_metric("goal.create.entries", len(goal.roadmap), metadata={"goal_id": str(goal.id)})
    logger.info("Created goal %s with %s roadmap entries", goal.id, len(goal.roadmap))
    return goal


def list_goals(db: Session, owner_id: UUID, request_id: Optional[str] = None) -> List[Goal]:
    with trace("goal.list", user_id=str(owner_id), request_id=request_id):
        goals = goal_store.list_owned_goals(db, owner_id)
    log_metric("goal.list.count", len(goals), metadata={"user_id": str(owner_id)})
    return goals


def toggle_task(
    db: Session,
    owner_id: UUID,
    goal_id: UUID,
    entry_id: UUID,
    request_id: Optional[str] = None,
) -> Goal:
    """Flip ``completed`` on a single roadmap entry of an owned goal."""
    metadata = {"goal_id": str(goal_id), "entry_id": str(entry_id)}
    with trace("goal.toggle_task", metadata=metadata, user_id=str(owner_id), request_id=request_id) as span:
        goal = goal_store.find_owned_goal(db, owner_id, goal_id)
        if goal is None:
            raise NotFound("Goal not found")

        roadmap = [dict(entry) for entry in goal.roadmap or []]
        target = next((entry for entry in roadmap if entry.get("id") == str(entry_id)), None)
        if target is None:
            raise NotFound("Task not found")

        target["completed"] = not bool(target.get("completed"))
        goal.roadmap = roadmap
        goal = goal_store.save_goal(db, goal)
        annotate(span, completed=target["completed"])

    log_metric("goal.toggle_task.success", 1, metadata={**metadata, "completed": target["completed"]})
    logger.info("Toggled entry %s on goal %s -> completed=%s", entry_id, goal_id, target["completed"])
    return goal


def replace_goal_fields(
    db: Session,
    owner_id: UUID,
    goal_id: UUID,
    fields: Dict[str, Any],
    request_id: Optional[str] = None,
) -> Goal:
    """Replace the roadmap sequence and/or advisory fields of an owned goal.

    Roadmap entries are stored exactly as supplied; ``day`` values are neither
    renumbered nor deduplicated. Entries without an id get a fresh one.
    """
    updates = dict(fields)
    metadata = {"goal_id": str(goal_id), "fields": sorted(updates)}
    with trace("goal.replace", metadata=metadata, user_id=str(owner_id), request_id=request_id):
        goal = goal_store.find_owned_goal(db, owner_id, goal_id)
        if goal is None:
            raise NotFound("Goal not found")
        if "roadmap" in updates:
            updates["roadmap"] = _normalize_supplied_roadmap(updates["roadmap"])
        if updates:
            goal = goal_store.merge_goal_fields(db, owner_id, goal_id, updates)
            if goal is None:
                raise NotFound("Goal not found")

    log_metric("goal.replace.success", 1, metadata=metadata)
    logger.info("Replaced fields %s on goal %s", sorted(updates), goal_id)
    return goal


def delete_goal(db: Session, owner_id: UUID, goal_id: UUID, request_id: Optional[str] = None) -> None:
    with trace("goal.delete", metadata={"goal_id": str(goal_id)}, user_id=str(owner_id), request_id=request_id):
        deleted = goal_store.delete_owned_goal(db, owner_id, goal_id)
        if deleted is None:
            raise NotFound("Goal not found")

    log_metric("goal.delete.success", 1, metadata={"goal_id": str(goal_id)})
    logger.info("Deleted goal %s", goal_id)


def _new_entry(day: int, task: str) -> Dict[str, Any]:
    return {"id": str(uuid4()), "day": day, "task": task, "completed": False}


def _normalize_supplied_roadmap(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    normalized: List[Dict[str, Any]] = []
    seen: set[str] = set()
    for entry in entries:
        entry_id = str(entry.get("id") or uuid4())
        if entry_id in seen:
            raise ValidationFailure("Duplicate roadmap entry id", details={"id": entry_id})
        seen.add(entry_id)
        normalized.append(
            {
                "id": entry_id,
                "day": entry["day"],
                "task": entry["task"],
                "completed": bool(entry.get("completed", False)),
            }
        )
    return normalized
