"""SQLAlchemy-backed notification and user-profile stores."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine

from src.db.engine import get_async_session_factory
from src.db.models import NotificationRow, UserProfileRow
from src.notifications.config import DeliveryChannel, NotificationKind
from src.notifications.models import NotificationRecord, UserProfile, coerce_kind

_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlUserProfileStore:
    """User-profile store with a native ``INSERT ... ON CONFLICT`` upsert."""

    def __init__(self, engine: AsyncEngine):
        dialect = engine.dialect.name
        if dialect not in _UPSERT_INSERTS:
            raise ValueError(f"Unsupported dialect for upsert: {dialect}")
        self._insert = _UPSERT_INSERTS[dialect]
        self._sessions = get_async_session_factory(engine)

    async def upsert_user_profile(self, fields: dict) -> UserProfile:
        if not fields.get("user_id"):
            raise ValueError("user_id is required")

        values = {
            "user_id": fields["user_id"],
            "fcm_token": fields.get("fcm_token"),
            "device_type": fields.get("device_type"),
            "app_version": fields.get("app_version"),
        }
        stmt = self._insert(UserProfileRow).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id"],
            set_={
                "fcm_token": stmt.excluded.fcm_token,
                "device_type": stmt.excluded.device_type,
                "app_version": stmt.excluded.app_version,
                "updated_at": func.now(),
            },
        )

        async with self._sessions() as session:
            await session.execute(stmt)
            await session.commit()

        return await self.get_user_profile(values["user_id"])

    async def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        async with self._sessions() as session:
            result = await session.execute(
                select(UserProfileRow).where(UserProfileRow.user_id == user_id)
            )
            row = result.scalar_one_or_none()

        if row is None:
            return None
        return UserProfile.from_store_fields({
            "user_id": row.user_id,
            "fcm_token": row.fcm_token,
            "device_type": row.device_type,
            "app_version": row.app_version,
            "updated_at": _aware(row.updated_at),
        })

    async def count(self) -> int:
        async with self._sessions() as session:
            result = await session.execute(select(func.count()).select_from(UserProfileRow))
            return result.scalar_one()


class SqlNotificationStore:
    """Notification store persisted through SQLAlchemy."""

    def __init__(self, engine: AsyncEngine):
        self._sessions = get_async_session_factory(engine)

    async def create_notification(self, fields: dict) -> NotificationRecord:
        record = NotificationRecord.from_store_fields(fields)
        row = NotificationRow(
            id=record.id,
            type=record.kind.value,
            title=record.title,
            message=record.message,
            data=record.payload,
            delivery_channel=record.delivery_channel.value,
            read=record.read,
            scheduled_for=record.scheduled_for,
            created_at=record.created_at,
        )
        async with self._sessions() as session:
            session.add(row)
            await session.commit()
        return record

    async def get_notification(self, notification_id: str) -> Optional[NotificationRecord]:
        async with self._sessions() as session:
            row = await session.get(NotificationRow, notification_id)
        return self._to_record(row) if row is not None else None

    async def list_notifications(
        self,
        unread_only: bool = False,
        kind: Optional[NotificationKind] = None,
        limit: Optional[int] = None,
    ) -> list[NotificationRecord]:
        query = select(NotificationRow).order_by(NotificationRow.created_at.desc())
        if unread_only:
            query = query.where(NotificationRow.read.is_(False))
        if kind is not None:
            query = query.where(NotificationRow.type == coerce_kind(kind).value)
        if limit is not None:
            query = query.limit(limit)

        async with self._sessions() as session:
            result = await session.execute(query)
            rows = result.scalars().all()
        return [self._to_record(row) for row in rows]

    async def mark_read(self, notification_id: str) -> bool:
        async with self._sessions() as session:
            row = await session.get(NotificationRow, notification_id)
            if row is None:
                return False
            if not row.read:
                row.read = True
                row.read_at = datetime.now(timezone.utc)
                await session.commit()
        return True

    async def mark_all_read(self) -> int:
        async with self._sessions() as session:
            result = await session.execute(
                update(NotificationRow)
                .where(NotificationRow.read.is_(False))
                .values(read=True, read_at=datetime.now(timezone.utc))
            )
            await session.commit()
        return result.rowcount

    async def unread_count(self) -> int:
        async with self._sessions() as session:
            result = await session.execute(
                select(func.count())
                .select_from(NotificationRow)
                .where(NotificationRow.read.is_(False))
            )
            return result.scalar_one()

    @staticmethod
    def _to_record(row: NotificationRow) -> NotificationRecord:
        return NotificationRecord(
            id=row.id,
            kind=NotificationKind(row.type),
            title=row.title,
            message=row.message,
            payload=dict(row.data or {}),
            delivery_channel=DeliveryChannel(row.delivery_channel),
            read=bool(row.read),
            read_at=_aware(row.read_at),
            scheduled_for=_aware(row.scheduled_for),
            created_at=_aware(row.created_at),
        )
