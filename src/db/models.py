"""SQLAlchemy ORM models for the notification subsystem.

Tables:
- user_profiles: Push registration fields of a user profile (one row per user)
- notifications: Durable notification list with read state
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
)

from src.db.base import Base


class UserProfileRow(Base):
    """Notification fields of a user profile, keyed by user id."""

    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), unique=True, nullable=False, index=True)
    fcm_token = Column(String(500))
    device_type = Column(String(20))  # ios, android, web
    app_version = Column(String(20))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class NotificationRow(Base):
    """A delivered notification as listed by the app."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True)
    type = Column(String(20), nullable=False, index=True)  # signal, achievement, announcement, alert
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON)
    delivery_channel = Column(String(10), nullable=False, default="local")  # local, remote
    read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True))
    scheduled_for = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_notifications_read_created", "read", "created_at"),
    )
