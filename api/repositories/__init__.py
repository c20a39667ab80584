"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping routes thin and focused
on HTTP handling. This separation provides:
- Single source of truth for database operations
- Easier testing (repositories can be mocked)
- Reusable queries across multiple endpoints
"""

from repositories.habit_log_repository import HabitLogRepository
from repositories.habit_repository import HabitRepository
from repositories.utils import log_slow_query

__all__ = [
    "HabitLogRepository",
    "HabitRepository",
    "log_slow_query",
]
