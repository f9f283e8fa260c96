from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from goalplanner.core.errors import StoreUnavailable
from goalplanner.db.models.goal import Goal
from goalplanner.db.models.user import User
from goalplanner.services import goal_store


@pytest.fixture()
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover - sqlite setup
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    User.__table__.create(bind=engine)
    Goal.__table__.create(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def _seed_goal(db, owner_email: str = "owner@example.com") -> Goal:
    owner = User(id=uuid4(), name="Owner", email=owner_email, password_hash="x")
    db.add(owner)
    db.commit()
    goal = Goal(
        user_id=owner.id,
        title="Learn guitar",
        deadline=date(2026, 4, 1),
        hours_per_day=1.0,
        roadmap=[{"id": str(uuid4()), "day": 1, "task": "Tune", "completed": False}],
    )
    return goal_store.insert_goal(db, goal)


def test_find_goal_ignores_owner(session) -> None:
    goal = _seed_goal(session)

    assert goal_store.find_goal(session, goal.id) is goal
    assert goal_store.find_goal(session, uuid4()) is None
    assert goal_store.find_owned_goal(session, uuid4(), goal.id) is None


def test_merge_goal_fields_scoped_to_owner(session) -> None:
    goal = _seed_goal(session)

    assert goal_store.merge_goal_fields(session, uuid4(), goal.id, {"hours_per_day": 3.0}) is None

    merged = goal_store.merge_goal_fields(session, goal.user_id, goal.id, {"hours_per_day": 3.0, "roadmap": []})
    assert merged is not None
    assert merged.hours_per_day == 3.0
    assert merged.roadmap == []
    assert merged.title == "Learn guitar"


def test_merge_goal_fields_rejects_immutable_columns(session) -> None:
    goal = _seed_goal(session)

    with pytest.raises(ValueError):
        goal_store.merge_goal_fields(session, goal.user_id, goal.id, {"title": "Something else"})


def test_delete_owned_goal_returns_deleted_row(session) -> None:
    goal = _seed_goal(session)
    goal_id = goal.id

    assert goal_store.delete_owned_goal(session, uuid4(), goal_id) is None
    assert goal_store.delete_owned_goal(session, goal.user_id, goal_id) is not None
    assert goal_store.find_goal(session, goal_id) is None


def test_commit_failure_rolls_back(session, monkeypatch) -> None:
    goal = _seed_goal(session)
    goal.hours_per_day = 5.0

    def broken_commit():
        raise OperationalError("UPDATE goals", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "commit", broken_commit)

    with pytest.raises(StoreUnavailable):
        goal_store.save_goal(session, goal)


def test_read_failure_raises_store_unavailable(session, monkeypatch) -> None:
    goal = _seed_goal(session)

    def broken_query(*entities, **kwargs):
        raise OperationalError("SELECT goals", {}, Exception("connection refused"))

    monkeypatch.setattr(session, "query", broken_query)

    with pytest.raises(StoreUnavailable):
        goal_store.find_owned_goal(session, goal.user_id, goal.id)
    with pytest.raises(StoreUnavailable):
        goal_store.list_owned_goals(session, goal.user_id)
