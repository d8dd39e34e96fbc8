"""Mobile Notifications.

Notification subsystem of the trading-alert app:
- Permission gate (OS notification permission)
- Push-token registration on the user profile
- Local/scheduled dispatch mirrored into the notification list
- Received / opened listeners with explicit teardown
"""

from src.notifications.config import (
    DeliveryChannel,
    NotificationKind,
    PermissionState,
    Platform,
    RegistrationStatus,
    NotificationConfig,
    DEFAULT_NOTIFICATION_CONFIG,
    KIND_CONFIGS,
)
from src.notifications.errors import (
    NotificationError,
    PermissionDenied,
    TokenUnavailable,
    PersistenceFailure,
    DisplayFailure,
    InvalidNotification,
    UnknownNotificationKind,
)
from src.notifications.models import (
    AchievementPayload,
    AlertPayload,
    AnnouncementPayload,
    SignalPayload,
    UserProfile,
    NotificationInput,
    NotificationRecord,
    RegistrationResult,
    DispatchResult,
    check_envelope,
    parse_payload,
)
from src.notifications.platform import (
    NotificationCenter,
    NotificationResponse,
    ReceivedNotification,
    SimulatedNotificationCenter,
    Subscription,
)
from src.notifications.store import (
    InMemoryNotificationStore,
    InMemoryUserProfileStore,
    NotificationStore,
    UserProfileStore,
)
from src.notifications.sql_store import SqlNotificationStore, SqlUserProfileStore
from src.notifications.permissions import PermissionGate
from src.notifications.registrar import TokenRegistrar
from src.notifications.dispatcher import NotificationDispatcher
from src.notifications.listeners import ListenerAttachment, ListenerHub, TapRouter
from src.notifications.session import NotificationSession

__all__ = [
    # Config
    "DeliveryChannel",
    "NotificationKind",
    "PermissionState",
    "Platform",
    "RegistrationStatus",
    "NotificationConfig",
    "DEFAULT_NOTIFICATION_CONFIG",
    "KIND_CONFIGS",
    # Errors
    "NotificationError",
    "PermissionDenied",
    "TokenUnavailable",
    "PersistenceFailure",
    "DisplayFailure",
    "InvalidNotification",
    "UnknownNotificationKind",
    # Models
    "AchievementPayload",
    "AlertPayload",
    "AnnouncementPayload",
    "SignalPayload",
    "UserProfile",
    "NotificationInput",
    "NotificationRecord",
    "RegistrationResult",
    "DispatchResult",
    "check_envelope",
    "parse_payload",
    # Platform
    "NotificationCenter",
    "NotificationResponse",
    "ReceivedNotification",
    "SimulatedNotificationCenter",
    "Subscription",
    # Stores
    "InMemoryNotificationStore",
    "InMemoryUserProfileStore",
    "NotificationStore",
    "UserProfileStore",
    "SqlNotificationStore",
    "SqlUserProfileStore",
    # Components
    "PermissionGate",
    "TokenRegistrar",
    "NotificationDispatcher",
    "ListenerAttachment",
    "ListenerHub",
    "TapRouter",
    "NotificationSession",
]
