from goalplanner.db.base import Base
from goalplanner.db import models  # noqa: F401  ensure models are loaded


def test_metadata_contains_core_tables() -> None:
    assert set(Base.metadata.tables.keys()) == {"users", "goals"}


def test_goal_rows_cascade_with_their_owner() -> None:
    goals = Base.metadata.tables["goals"]
    (foreign_key,) = goals.c.user_id.foreign_keys

    assert foreign_key.column.table.name == "users"
    assert foreign_key.ondelete == "CASCADE"


def test_user_email_is_unique() -> None:
    users = Base.metadata.tables["users"]

    assert users.c.email.unique
