"""Data models for Mobile Notifications."""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Optional, Union
import uuid

from src.notifications.config import (
    DeliveryChannel,
    NotificationKind,
    Platform,
    RegistrationStatus,
)
from src.notifications.errors import (
    InvalidNotification,
    NotificationError,
    UnknownNotificationKind,
)


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_kind(value: Any) -> NotificationKind:
    """Resolve a kind value, rejecting anything outside the closed set."""
    if isinstance(value, NotificationKind):
        return value
    try:
        return NotificationKind(value)
    except ValueError:
        raise UnknownNotificationKind(value) from None


def check_envelope(kind: Any, title: Any, message: Any) -> NotificationKind:
    """Validate the kind, title and message shared by every notification.

    The payload is not inspected; records keep whatever data arrived.
    """
    kind = coerce_kind(kind)
    for name, value in (("title", title), ("message", message)):
        if not isinstance(value, str) or not value.strip():
            raise InvalidNotification(f"Notification {name} must be a non-empty string", field=name)
    return kind


def _split_known(cls, data: dict) -> dict:
    """Split raw payload data into declared fields and ``extra``."""
    declared = {f.name for f in fields(cls) if f.name != "extra"}
    kwargs = {k: v for k, v in data.items() if k in declared}
    kwargs["extra"] = {k: v for k, v in data.items() if k not in declared}
    return kwargs


class _PayloadMixin:
    kind: ClassVar[NotificationKind]

    @classmethod
    def from_dict(cls, data: Optional[dict]):
        try:
            return cls(**_split_known(cls, data or {}))
        except TypeError as e:
            raise InvalidNotification(
                f"Invalid {cls.kind.value} payload: {e}", field="payload"
            ) from None

    def to_dict(self) -> dict:
        data = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        return {**self.extra, **data}


@dataclass
class SignalPayload(_PayloadMixin):
    """Payload for trading signal notifications."""

    kind: ClassVar[NotificationKind] = NotificationKind.SIGNAL

    signal_id: str
    pair: Optional[str] = None  # e.g. XAU/USD
    extra: dict = field(default_factory=dict)

    def __post_init__(self):
        if not self.signal_id:
            raise InvalidNotification("Signal payload requires signal_id", field="payload")


@dataclass
class AchievementPayload(_PayloadMixin):
    """Payload for streak and milestone notifications."""

    kind: ClassVar[NotificationKind] = NotificationKind.ACHIEVEMENT

    achievement_id: Optional[str] = None
    reached: Optional[int] = None  # View count shown in the list
    extra: dict = field(default_factory=dict)


@dataclass
class AnnouncementPayload(_PayloadMixin):
    """Payload for market updates and announcements."""

    kind: ClassVar[NotificationKind] = NotificationKind.ANNOUNCEMENT

    url: Optional[str] = None
    extra: dict = field(default_factory=dict)


@dataclass
class AlertPayload(_PayloadMixin):
    """Payload for stop-loss and risk alerts."""

    kind: ClassVar[NotificationKind] = NotificationKind.ALERT

    signal_id: Optional[str] = None
    pair: Optional[str] = None
    severity: str = "warning"  # warning, critical
    extra: dict = field(default_factory=dict)


NotificationPayload = Union[SignalPayload, AchievementPayload, AnnouncementPayload, AlertPayload]

PAYLOAD_TYPES: dict[NotificationKind, type] = {
    NotificationKind.SIGNAL: SignalPayload,
    NotificationKind.ACHIEVEMENT: AchievementPayload,
    NotificationKind.ANNOUNCEMENT: AnnouncementPayload,
    NotificationKind.ALERT: AlertPayload,
}


def parse_payload(kind: Union[NotificationKind, str], data: Optional[dict]) -> NotificationPayload:
    """Decode raw payload data into the payload type declared by ``kind``."""
    return PAYLOAD_TYPES[coerce_kind(kind)].from_dict(data)


@dataclass
class UserProfile:
    """Notification fields of a user profile."""

    user_id: str
    push_token: Optional[str] = None
    device_platform: Optional[Platform] = None
    app_version: Optional[str] = None
    updated_at: Optional[datetime] = None

    def to_store_fields(self) -> dict:
        """Field names used by the user-profile store."""
        return {
            "user_id": self.user_id,
            "fcm_token": self.push_token,
            "device_type": self.device_platform.value if self.device_platform else None,
            "app_version": self.app_version,
        }

    @classmethod
    def from_store_fields(cls, data: dict) -> "UserProfile":
        device_type = data.get("device_type")
        return cls(
            user_id=data["user_id"],
            push_token=data.get("fcm_token"),
            device_platform=Platform(device_type) if device_type else None,
            app_version=data.get("app_version"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class NotificationInput:
    """A notification to deliver; id, read flag and timestamps are assigned by the store.

    A dict payload is kept as given and only decoded by ``typed_payload``.
    """

    kind: NotificationKind
    title: str
    message: str
    payload: dict = field(default_factory=dict)

    def __post_init__(self):
        self.kind = check_envelope(self.kind, self.title, self.message)
        if isinstance(self.payload, _PayloadMixin):
            if self.payload.kind != self.kind:
                raise InvalidNotification(
                    f"{self.payload.kind.value} payload given for {self.kind.value} notification",
                    field="payload",
                )
            self.payload = self.payload.to_dict()
        else:
            self.payload = dict(self.payload or {})

    def typed_payload(self) -> NotificationPayload:
        return parse_payload(self.kind, self.payload)

    def to_content_data(self, kind_key: str = "type") -> dict:
        """Data attached to the platform notification."""
        return {**self.payload, kind_key: self.kind.value}

    def to_store_fields(
        self,
        channel: DeliveryChannel,
        scheduled_for: Optional[datetime] = None,
    ) -> dict:
        return {
            "type": self.kind.value,
            "title": self.title,
            "message": self.message,
            "data": dict(self.payload),
            "delivery_channel": channel.value,
            "scheduled_for": scheduled_for,
        }


@dataclass
class NotificationRecord:
    """Durable notification listed by the UI."""

    kind: NotificationKind
    title: str
    message: str
    payload: dict = field(default_factory=dict)
    delivery_channel: DeliveryChannel = DeliveryChannel.LOCAL
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    read: bool = False
    read_at: Optional[datetime] = None
    scheduled_for: Optional[datetime] = None

    @classmethod
    def from_store_fields(cls, data: dict) -> "NotificationRecord":
        """Build a new record from ``create_notification`` fields.

        The data dict is stored as given; only the envelope is validated.
        """
        title = data.get("title")
        message = data.get("message")
        kind = check_envelope(data.get("type"), title, message)
        return cls(
            kind=kind,
            title=title,
            message=message,
            payload=dict(data.get("data") or {}),
            delivery_channel=DeliveryChannel(data.get("delivery_channel", "local")),
            scheduled_for=data.get("scheduled_for"),
        )

    def mark_read(self) -> bool:
        """Mark as read. Returns True if the flag changed."""
        if self.read:
            return False
        self.read = True
        self.read_at = _now()
        return True

    def typed_payload(self) -> NotificationPayload:
        return parse_payload(self.kind, self.payload)

    def time_ago(self, now: Optional[datetime] = None) -> str:
        """Relative timestamp as shown in the notification list."""
        now = now or _now()
        seconds = int((now - self.created_at).total_seconds())
        if seconds < 60:
            return "just now"
        if seconds >= 4 * 604800:
            return self.created_at.strftime("%Y-%m-%d")

        for unit, size in (("week", 604800), ("day", 86400), ("hour", 3600)):
            if seconds >= size:
                break
        else:
            unit, size = "minute", 60
        count = seconds // size
        return f"{count} {unit}{'s' if count != 1 else ''} ago"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.kind.value,
            "title": self.title,
            "message": self.message,
            "data": self.payload,
            "delivery_channel": self.delivery_channel.value,
            "read": self.read,
            "created_at": self.created_at.isoformat(),
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "scheduled_for": self.scheduled_for.isoformat() if self.scheduled_for else None,
        }


@dataclass
class RegistrationResult:
    """Result of a push-token registration."""

    user_id: str
    status: RegistrationStatus
    token: Optional[str] = None
    error: Optional[NotificationError] = None
    timestamp: datetime = field(default_factory=_now)

    def __bool__(self) -> bool:
        return self.status == RegistrationStatus.REGISTERED

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "status": self.status.value,
            "registered": bool(self),
            "error": self.error.to_dict() if self.error else None,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class DispatchResult:
    """Result of dispatching a notification."""

    displayed: bool = False
    platform_id: Optional[str] = None
    record: Optional[NotificationRecord] = None
    errors: list[NotificationError] = field(default_factory=list)

    @property
    def persisted(self) -> bool:
        return self.record is not None

    def to_dict(self) -> dict:
        return {
            "displayed": self.displayed,
            "platform_id": self.platform_id,
            "record_id": self.record.id if self.record else None,
            "errors": [e.to_dict() for e in self.errors],
        }
