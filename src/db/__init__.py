"""Database package for tradealerts."""

from src.db.base import Base
from src.db.engine import (
    AsyncSessionLocal,
    create_tables,
    dispose_engine,
    get_async_engine,
    get_async_session_factory,
)
from src.db.models import NotificationRow, UserProfileRow

__all__ = [
    "Base",
    "get_async_engine",
    "get_async_session_factory",
    "AsyncSessionLocal",
    "create_tables",
    "dispose_engine",
    "NotificationRow",
    "UserProfileRow",
]
