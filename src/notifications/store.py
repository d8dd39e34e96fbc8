"""Notification and user-profile stores.

Protocols consumed by the registrar and dispatcher, and the in-memory
implementations used on-device, in tests and in demo mode.
"""

from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable

from src.notifications.config import NotificationKind
from src.notifications.models import NotificationRecord, UserProfile, coerce_kind


@runtime_checkable
class UserProfileStore(Protocol):
    """Stores the notification fields of a user profile."""

    async def upsert_user_profile(self, fields: dict) -> UserProfile: ...

    async def get_user_profile(self, user_id: str) -> Optional[UserProfile]: ...


@runtime_checkable
class NotificationStore(Protocol):
    """System of record for the notification list."""

    async def create_notification(self, fields: dict) -> NotificationRecord: ...

    async def get_notification(self, notification_id: str) -> Optional[NotificationRecord]: ...

    async def list_notifications(
        self,
        unread_only: bool = False,
        kind: Optional[NotificationKind] = None,
        limit: Optional[int] = None,
    ) -> list[NotificationRecord]: ...

    async def mark_read(self, notification_id: str) -> bool: ...

    async def mark_all_read(self) -> int: ...

    async def unread_count(self) -> int: ...


class InMemoryUserProfileStore:
    """User-profile store keyed by user id."""

    def __init__(self):
        self._profiles: dict[str, UserProfile] = {}
        self.upserts = 0

    async def upsert_user_profile(self, fields: dict) -> UserProfile:
        if not fields.get("user_id"):
            raise ValueError("user_id is required")
        self.upserts += 1
        profile = UserProfile.from_store_fields(fields)
        profile.updated_at = datetime.now(timezone.utc)
        self._profiles[profile.user_id] = profile
        return profile

    async def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        return self._profiles.get(user_id)

    def __len__(self) -> int:
        return len(self._profiles)


class InMemoryNotificationStore:
    """Notification store held in process memory."""

    def __init__(self):
        self._records: dict[str, NotificationRecord] = {}

    async def create_notification(self, fields: dict) -> NotificationRecord:
        record = NotificationRecord.from_store_fields(fields)
        self._records[record.id] = record
        return record

    async def get_notification(self, notification_id: str) -> Optional[NotificationRecord]:
        return self._records.get(notification_id)

    async def list_notifications(
        self,
        unread_only: bool = False,
        kind: Optional[NotificationKind] = None,
        limit: Optional[int] = None,
    ) -> list[NotificationRecord]:
        records = list(self._records.values())
        if unread_only:
            records = [r for r in records if not r.read]
        if kind is not None:
            kind = coerce_kind(kind)
            records = [r for r in records if r.kind == kind]

        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit] if limit is not None else records

    async def mark_read(self, notification_id: str) -> bool:
        record = self._records.get(notification_id)
        if record is None:
            return False
        record.mark_read()
        return True

    async def mark_all_read(self) -> int:
        return sum(1 for r in self._records.values() if r.mark_read())

    async def unread_count(self) -> int:
        return sum(1 for r in self._records.values() if not r.read)

    def __len__(self) -> int:
        return len(self._records)
