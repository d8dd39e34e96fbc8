"""Tests for src/db/: declarative base, engine factory and ORM models.

Run: python3 -m pytest tests/test_db.py -v
"""

import os
import sys
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import JSON, Boolean, DateTime, String

from src.db.base import Base
from src.db.models import NotificationRow, UserProfileRow


class TestDbBase(unittest.TestCase):
    """Tests for the SQLAlchemy declarative base."""

    def test_base_is_declarative_base(self):
        from sqlalchemy.orm import DeclarativeBase
        self.assertTrue(issubclass(Base, DeclarativeBase))

    def test_base_metadata_has_tables(self):
        tables = Base.metadata.tables
        self.assertIn("user_profiles", tables)
        self.assertIn("notifications", tables)


class TestUserProfileRow(unittest.TestCase):
    """Tests for the user_profiles table."""

    def test_tablename(self):
        self.assertEqual(UserProfileRow.__tablename__, "user_profiles")

    def test_user_id_unique(self):
        column = UserProfileRow.__table__.c.user_id
        self.assertTrue(column.unique)
        self.assertFalse(column.nullable)

    def test_store_field_columns(self):
        columns = UserProfileRow.__table__.c
        for name in ("fcm_token", "device_type", "app_version"):
            self.assertIn(name, columns)
            self.assertIsInstance(columns[name].type, String)


class TestNotificationRow(unittest.TestCase):
    """Tests for the notifications table."""

    def test_tablename(self):
        self.assertEqual(NotificationRow.__tablename__, "notifications")

    def test_column_types(self):
        columns = NotificationRow.__table__.c
        self.assertIsInstance(columns.data.type, JSON)
        self.assertIsInstance(columns.read.type, Boolean)
        self.assertIsInstance(columns.created_at.type, DateTime)
        self.assertTrue(columns.created_at.type.timezone)

    def test_required_columns(self):
        columns = NotificationRow.__table__.c
        for name in ("type", "title", "message", "delivery_channel", "read", "created_at"):
            self.assertFalse(columns[name].nullable, name)

    def test_read_created_index(self):
        names = {index.name for index in NotificationRow.__table__.indexes}
        self.assertIn("ix_notifications_read_created", names)


class TestDbAsyncEngine(unittest.TestCase):
    """Tests for async engine creation."""

    def test_explicit_url_builds_fresh_engine(self):
        from src.db.engine import get_async_engine

        url = "sqlite+aiosqlite:///:memory:"
        first = get_async_engine(url)
        second = get_async_engine(url)
        self.assertIsNot(first, second)
        self.assertEqual(first.dialect.name, "sqlite")

    @patch("src.db.engine.create_async_engine")
    @patch("src.db.engine.get_settings")
    def test_shared_engine_uses_settings(self, mock_settings, mock_create):
        import src.db.engine as engine_mod

        mock_settings.return_value.database_url = "sqlite+aiosqlite:///shared.db"
        original = engine_mod._async_engine
        engine_mod._async_engine = None
        try:
            first = engine_mod.get_async_engine()
            second = engine_mod.get_async_engine()
            self.assertIs(first, second)
            mock_create.assert_called_once_with("sqlite+aiosqlite:///shared.db", pool_pre_ping=True)
        finally:
            engine_mod._async_engine = original


if __name__ == "__main__":
    unittest.main()
