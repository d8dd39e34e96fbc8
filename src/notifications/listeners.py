"""Notification listener hub.

Owns the platform listener subscriptions of one app session. Each
attachment registers one "received" and one "opened" listener and is
released by an idempotent teardown.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from src.notifications.config import (
    DEFAULT_NOTIFICATION_CONFIG,
    DeliveryChannel,
    NotificationConfig,
    NotificationKind,
)
from src.notifications.dispatcher import NotificationDispatcher
from src.notifications.errors import InvalidNotification
from src.notifications.models import NotificationPayload, coerce_kind, parse_payload
from src.notifications.platform import (
    NotificationCenter,
    NotificationResponse,
    ReceivedNotification,
    Subscription,
)

logger = logging.getLogger(__name__)

MaybeAwaitable = Union[None, Awaitable[None]]
ReceivedHandler = Callable[[ReceivedNotification], MaybeAwaitable]
OpenedHandler = Callable[[Optional[str], dict], MaybeAwaitable]


async def _call_handler(handler: Callable, *args: Any) -> None:
    # Handler errors must not propagate into the platform's event loop
    try:
        result = handler(*args)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception(f"Notification handler {getattr(handler, '__name__', handler)!r} failed")


class ListenerAttachment:
    """Subscriptions registered by one ``ListenerHub.attach`` call.

    Usable as a callable, a context manager, or through ``teardown``.
    """

    def __init__(self, hub: "ListenerHub", subscriptions: list[Subscription]):
        self._hub = hub
        self._subscriptions = subscriptions

    @property
    def active(self) -> bool:
        return bool(self._subscriptions)

    def teardown(self) -> None:
        """Remove the subscriptions. Safe to call any number of times."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            try:
                self._hub.center.remove_subscription(subscription)
            except Exception:
                logger.exception(f"Error removing subscription {subscription.subscription_id}")
        if subscriptions:
            self._hub._detach(self)

    def __call__(self) -> None:
        self.teardown()

    def __enter__(self) -> "ListenerAttachment":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()


class ListenerHub:
    """Forwards platform notification events to UI-supplied handlers.

    The hub performs no navigation. Opened handlers receive the raw
    ``type`` value and the remaining content data. With a dispatcher,
    notifications pushed from the backend are recorded as they arrive.
    """

    def __init__(
        self,
        center: NotificationCenter,
        dispatcher: Optional[NotificationDispatcher] = None,
        config: Optional[NotificationConfig] = None,
    ):
        self.center = center
        self.dispatcher = dispatcher
        self.config = config or DEFAULT_NOTIFICATION_CONFIG
        self._attachments: list[ListenerAttachment] = []

    @property
    def active_subscriptions(self) -> int:
        return sum(len(a._subscriptions) for a in self._attachments)

    def attach(
        self,
        on_received: Optional[ReceivedHandler] = None,
        on_opened: Optional[OpenedHandler] = None,
    ) -> ListenerAttachment:
        """Subscribe to received and opened events until teardown."""

        async def handle_received(notification: ReceivedNotification) -> None:
            logger.debug(f"Notification received: {notification.identifier}")
            if (
                self.dispatcher is not None
                and self.config.persist_remote
                and notification.origin == DeliveryChannel.REMOTE
            ):
                try:
                    await self.dispatcher.record_remote(notification)
                except Exception:
                    logger.exception(f"Error recording remote notification {notification.identifier}")
            if on_received is not None:
                await _call_handler(on_received, notification)

        async def handle_response(response: NotificationResponse) -> None:
            data = dict(response.notification.data)
            kind = data.pop(self.config.kind_data_key, None)
            logger.debug(f"Notification opened: {response.notification.identifier} ({kind})")
            if on_opened is not None:
                await _call_handler(on_opened, kind, data)

        received = self.center.add_received_listener(handle_received)
        try:
            response = self.center.add_response_listener(handle_response)
        except Exception:
            self.center.remove_subscription(received)
            raise

        attachment = ListenerAttachment(self, [received, response])
        self._attachments.append(attachment)
        return attachment

    def teardown_all(self) -> None:
        """Tear down every live attachment."""
        for attachment in list(self._attachments):
            attachment.teardown()

    def _detach(self, attachment: ListenerAttachment) -> None:
        if attachment in self._attachments:
            self._attachments.remove(attachment)


TapHandler = Callable[[NotificationPayload], MaybeAwaitable]


class TapRouter:
    """Routes opened notifications to handlers by kind.

    Pass the router as ``on_opened``. The payload is decoded into the
    kind's payload type before the handler runs; unknown kinds and
    malformed payloads are logged and dropped.

    Example:
        router = TapRouter()
        router.on(NotificationKind.SIGNAL, lambda p: open_signal(p.signal_id))
        hub.attach(on_opened=router)
    """

    def __init__(self):
        self._handlers: dict[NotificationKind, TapHandler] = {}

    def on(self, kind: NotificationKind, handler: TapHandler) -> "TapRouter":
        self._handlers[coerce_kind(kind)] = handler
        return self

    async def __call__(self, kind: Optional[str], payload: dict) -> bool:
        """Route one opened notification. Returns True if a handler ran."""
        try:
            resolved = coerce_kind(kind)
            typed = parse_payload(resolved, payload)
        except InvalidNotification as e:
            logger.warning(f"Unroutable notification tap: {e}")
            return False

        handler = self._handlers.get(resolved)
        if handler is None:
            return False
        await _call_handler(handler, typed)
        return True
