"""Per-session wiring of the notification subsystem."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from src.logging_config import SessionContext, generate_session_id
from src.notifications.config import DEFAULT_NOTIFICATION_CONFIG, NotificationConfig
from src.notifications.dispatcher import NotificationDispatcher
from src.notifications.listeners import (
    ListenerAttachment,
    ListenerHub,
    OpenedHandler,
    ReceivedHandler,
)
from src.notifications.models import DispatchResult, NotificationInput, RegistrationResult
from src.notifications.permissions import PermissionGate
from src.notifications.platform import NotificationCenter
from src.notifications.registrar import TokenRegistrar
from src.notifications.store import NotificationStore, UserProfileStore

logger = logging.getLogger(__name__)


class NotificationSession:
    """Notification components for one app session.

    Construct once per app run and pass it by reference. Listener
    subscriptions belong to the session and are released by ``close``.
    """

    def __init__(
        self,
        center: NotificationCenter,
        notifications: NotificationStore,
        profiles: UserProfileStore,
        config: Optional[NotificationConfig] = None,
        session_id: str = "",
    ):
        self.config = config or DEFAULT_NOTIFICATION_CONFIG
        self.center = center
        self.notifications = notifications
        self.gate = PermissionGate(center)
        self.registrar = TokenRegistrar(self.gate, profiles, self.config)
        self.dispatcher = NotificationDispatcher(center, notifications, self.config)
        self.hub = ListenerHub(center, self.dispatcher, self.config)
        self.session_id = session_id or generate_session_id()
        self.user_id = ""

        center.set_notification_handler(self.config.presentation())

    async def register(self, user_id: str) -> RegistrationResult:
        with self._log_context(user_id):
            result = await self.registrar.register(user_id)
        if result:
            self.user_id = user_id
        return result

    async def dispatch(
        self,
        notification: NotificationInput,
        when: Optional[datetime] = None,
    ) -> DispatchResult:
        with self._log_context():
            return await self.dispatcher.dispatch(notification, when)

    async def send_test_notification(self) -> DispatchResult:
        with self._log_context():
            return await self.dispatcher.send_test_notification()

    def _log_context(self, user_id: Optional[str] = None) -> SessionContext:
        return SessionContext(
            session_id=self.session_id,
            user_id=self.user_id if user_id is None else user_id,
        )

    def attach(
        self,
        on_received: Optional[ReceivedHandler] = None,
        on_opened: Optional[OpenedHandler] = None,
    ) -> ListenerAttachment:
        return self.hub.attach(on_received, on_opened)

    @asynccontextmanager
    async def attached(
        self,
        on_received: Optional[ReceivedHandler] = None,
        on_opened: Optional[OpenedHandler] = None,
    ) -> AsyncIterator[ListenerAttachment]:
        """Keep listeners attached for the body of an ``async with`` block."""
        attachment = self.hub.attach(on_received, on_opened)
        try:
            yield attachment
        finally:
            attachment.teardown()

    def close(self) -> None:
        """Release every listener subscription of the session."""
        self.hub.teardown_all()
        logger.debug(f"Notification session {self.session_id} closed")

    async def __aenter__(self) -> "NotificationSession":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
