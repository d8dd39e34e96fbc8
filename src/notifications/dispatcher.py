"""Notification dispatch.

Shows a notification through the platform and mirrors it into the
notification store. The store write is attempted for every dispatch,
whether or not the platform showed the banner.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from src.notifications.config import (
    DEFAULT_NOTIFICATION_CONFIG,
    DeliveryChannel,
    NotificationConfig,
    NotificationKind,
)
from src.notifications.errors import DisplayFailure, InvalidNotification, PersistenceFailure
from src.notifications.models import (
    DispatchResult,
    NotificationInput,
    NotificationRecord,
    SignalPayload,
    check_envelope,
)
from src.notifications.platform import NotificationCenter, ReceivedNotification
from src.notifications.store import NotificationStore

logger = logging.getLogger(__name__)


TEST_NOTIFICATION = NotificationInput(
    kind=NotificationKind.SIGNAL,
    title="Test Signal Alert",
    message="This is a test notification from your trading app!",
    payload=SignalPayload(signal_id="test-123", pair="XAU/USD"),
)


class NotificationDispatcher:
    """Delivers notifications and records them. Never raises."""

    def __init__(
        self,
        center: NotificationCenter,
        store: NotificationStore,
        config: Optional[NotificationConfig] = None,
    ):
        self.center = center
        self.store = store
        self.config = config or DEFAULT_NOTIFICATION_CONFIG

    async def dispatch(
        self,
        notification: NotificationInput,
        when: Optional[datetime] = None,
        channel: DeliveryChannel = DeliveryChannel.LOCAL,
    ) -> DispatchResult:
        """Show ``notification`` now (``when=None``) or at ``when``, and record it.

        Args:
            notification: What to show.
            when: Scheduled display time; past times display immediately.
                Naive datetimes are taken as UTC.
            channel: Origin recorded on the stored notification.
        """
        result = DispatchResult()
        if when is not None and when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        scheduled_for = when if when is not None and when > datetime.now(timezone.utc) else None

        try:
            result.platform_id = await self.center.schedule_notification(
                title=notification.title,
                body=notification.message,
                data=notification.to_content_data(self.config.kind_data_key),
                trigger=scheduled_for,
            )
            result.displayed = True
        except Exception as e:
            error = DisplayFailure("Platform refused to show notification", cause=e)
            result.errors.append(error)
            logger.exception(
                "Error sending local notification",
                extra={"kind": notification.kind.value, "error_code": error.code},
            )

        result.record = await self._persist(
            notification.to_store_fields(channel, scheduled_for), result
        )
        return result

    async def record_remote(self, received: ReceivedNotification) -> Optional[NotificationRecord]:
        """Persist a notification pushed from the backend.

        The data is stored as received. Returns None when the kind, title
        or message is invalid, or when the store write fails.
        """
        data = dict(received.data)
        raw_kind = data.pop(self.config.kind_data_key, None)
        try:
            kind = check_envelope(raw_kind, received.title, received.body)
        except InvalidNotification as e:
            logger.warning(f"Ignoring remote notification {received.identifier}: {e}")
            return None

        fields = {
            "type": kind.value,
            "title": received.title,
            "message": received.body,
            "data": data,
            "delivery_channel": DeliveryChannel.REMOTE.value,
            "scheduled_for": None,
        }
        result = DispatchResult(displayed=True, platform_id=received.identifier)
        return await self._persist(fields, result)

    async def send_test_notification(self) -> DispatchResult:
        """Dispatch the demo signal notification."""
        return await self.dispatch(TEST_NOTIFICATION)

    async def _persist(self, fields: dict, result: DispatchResult) -> Optional[NotificationRecord]:
        try:
            record = await self.store.create_notification(fields)
        except Exception as e:
            error = PersistenceFailure("Notification could not be recorded", cause=e)
            result.errors.append(error)
            logger.exception(
                "Error saving notification",
                extra={"kind": fields["type"], "error_code": error.code},
            )
            return None

        logger.debug(
            f"Recorded {record.delivery_channel.value} {record.kind.value} notification",
            extra={"notification_id": record.id, "kind": record.kind.value},
        )
        return record
