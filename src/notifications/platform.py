"""Platform Notification Center.

Protocol for the device's notification center (permissions, push
tokens, local scheduling, listener subscriptions) plus a simulated
implementation that runs in demo mode without a device.
"""

import inspect
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

from src.notifications.config import DeliveryChannel, PermissionState, Platform

logger = logging.getLogger(__name__)

DEFAULT_ACTION = "default"

RECEIVED = "received"
RESPONSE = "response"


@dataclass
class ReceivedNotification:
    """A notification the platform presented on the device."""

    title: str
    body: str
    data: dict = field(default_factory=dict)
    origin: DeliveryChannel = DeliveryChannel.LOCAL
    identifier: str = field(default_factory=lambda: uuid.uuid4().hex[:16])
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class NotificationResponse:
    """User interaction with a presented notification."""

    notification: ReceivedNotification
    action_identifier: str = DEFAULT_ACTION


PlatformCallback = Callable[[Any], Union[None, Awaitable[None]]]


@dataclass
class Subscription:
    """Handle for a registered platform listener."""

    event: str
    callback: PlatformCallback
    subscription_id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])


@runtime_checkable
class NotificationCenter(Protocol):
    """Protocol for a platform notification center."""

    @property
    def platform(self) -> Platform: ...

    def set_notification_handler(self, presentation: dict) -> None: ...

    async def get_permissions(self) -> PermissionState: ...

    async def request_permissions(self) -> PermissionState: ...

    async def get_push_token(self) -> str: ...

    async def schedule_notification(
        self,
        title: str,
        body: str,
        data: dict,
        trigger: Optional[datetime] = None,
    ) -> str: ...

    def add_received_listener(self, callback: PlatformCallback) -> Subscription: ...

    def add_response_listener(self, callback: PlatformCallback) -> Subscription: ...

    def remove_subscription(self, subscription: Subscription) -> None: ...


class SimulatedNotificationCenter:
    """In-process notification center (demo mode).

    Behaves like a device: a denied permission is never re-prompted,
    immediate notifications are presented and reported to received
    listeners, scheduled ones wait for ``fire_due``. Failures can be
    injected with the ``fail_*`` flags.
    """

    def __init__(
        self,
        platform: Platform = Platform.IOS,
        permission: PermissionState = PermissionState.UNDETERMINED,
        grant_on_request: bool = True,
        token: Optional[str] = None,
    ):
        self._platform = platform
        self.permission = permission
        self.grant_on_request = grant_on_request
        self._token = token
        self.presentation: dict = {}

        self.fail_permissions = False
        self.fail_token = False
        self.fail_display = False

        self.permission_requests = 0
        self.token_requests = 0
        self.presented: list[ReceivedNotification] = []
        self._pending: list[tuple[datetime, ReceivedNotification]] = []
        self._subscriptions: dict[str, Subscription] = {}

    @property
    def platform(self) -> Platform:
        return self._platform

    @property
    def active_subscriptions(self) -> int:
        return len(self._subscriptions)

    @property
    def pending(self) -> list[ReceivedNotification]:
        return [n for _, n in sorted(self._pending, key=lambda p: p[0])]

    def set_notification_handler(self, presentation: dict) -> None:
        self.presentation = dict(presentation)

    async def get_permissions(self) -> PermissionState:
        if self.fail_permissions:
            raise RuntimeError("Permission service unavailable")
        return self.permission

    async def request_permissions(self) -> PermissionState:
        self.permission_requests += 1
        if self.fail_permissions:
            raise RuntimeError("Permission dialog failed")
        if self.permission == PermissionState.UNDETERMINED:
            self.permission = (
                PermissionState.GRANTED if self.grant_on_request else PermissionState.DENIED
            )
        return self.permission

    async def get_push_token(self) -> str:
        self.token_requests += 1
        if self.fail_token:
            raise ConnectionError("Push token service unreachable")
        if self._token is None:
            self._token = f"ExponentPushToken[{uuid.uuid4().hex[:22]}]"
        return self._token

    def invalidate_token(self) -> None:
        """Drop the current token; the next request issues a new one."""
        self._token = None

    async def schedule_notification(
        self,
        title: str,
        body: str,
        data: dict,
        trigger: Optional[datetime] = None,
    ) -> str:
        if self.fail_display:
            raise RuntimeError("Notification display refused")

        notification = ReceivedNotification(title=title, body=body, data=dict(data or {}))
        if trigger is not None and trigger > datetime.now(timezone.utc):
            self._pending.append((trigger, notification))
            logger.debug(f"Scheduled notification {notification.identifier} for {trigger.isoformat()}")
        else:
            await self._present(notification)
        return notification.identifier

    async def fire_due(self, now: Optional[datetime] = None) -> int:
        """Present scheduled notifications whose trigger time has passed."""
        now = now or datetime.now(timezone.utc)
        due = [p for p in self._pending if p[0] <= now]
        self._pending = [p for p in self._pending if p[0] > now]
        for _, notification in sorted(due, key=lambda p: p[0]):
            await self._present(notification)
        return len(due)

    async def deliver_remote(
        self,
        title: str,
        body: str,
        data: Optional[dict] = None,
    ) -> ReceivedNotification:
        """Simulate a push arriving from the delivery provider."""
        notification = ReceivedNotification(
            title=title,
            body=body,
            data=dict(data or {}),
            origin=DeliveryChannel.REMOTE,
        )
        await self._present(notification)
        return notification

    async def tap(self, identifier: str, action_identifier: str = DEFAULT_ACTION) -> NotificationResponse:
        """Simulate the user tapping a presented notification."""
        for notification in self.presented:
            if notification.identifier == identifier:
                response = NotificationResponse(notification, action_identifier)
                await self._emit(RESPONSE, response)
                return response
        raise KeyError(f"No presented notification {identifier}")

    def add_received_listener(self, callback: PlatformCallback) -> Subscription:
        return self._add(RECEIVED, callback)

    def add_response_listener(self, callback: PlatformCallback) -> Subscription:
        return self._add(RESPONSE, callback)

    def remove_subscription(self, subscription: Subscription) -> None:
        if self._subscriptions.pop(subscription.subscription_id, None) is None:
            raise ValueError(f"Subscription {subscription.subscription_id} is not registered")

    def _add(self, event: str, callback: PlatformCallback) -> Subscription:
        subscription = Subscription(event=event, callback=callback)
        self._subscriptions[subscription.subscription_id] = subscription
        return subscription

    async def _present(self, notification: ReceivedNotification) -> None:
        self.presented.append(notification)
        await self._emit(RECEIVED, notification)

    async def _emit(self, event: str, payload: Any) -> None:
        for subscription in list(self._subscriptions.values()):
            if subscription.event != event:
                continue
            try:
                result = subscription.callback(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Listener {subscription.subscription_id} failed on {event}")
