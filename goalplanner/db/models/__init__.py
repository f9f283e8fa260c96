"""ORM models exposed for metadata discovery."""
from goalplanner.db.models.goal import Goal
from goalplanner.db.models.user import User

__all__ = [
    "Goal",
    "User",
]
