"""Configuration for Mobile Notifications."""

from dataclasses import dataclass
from enum import Enum


class Platform(Enum):
    """Device platforms."""
    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


# Platforms with a native notification center
NATIVE_PLATFORMS = frozenset({Platform.IOS, Platform.ANDROID})


class PermissionState(Enum):
    """OS notification permission state."""
    UNDETERMINED = "undetermined"
    DENIED = "denied"
    GRANTED = "granted"


class NotificationKind(Enum):
    """Notification kinds shown in the notification list."""
    SIGNAL = "signal"
    ACHIEVEMENT = "achievement"
    ANNOUNCEMENT = "announcement"
    ALERT = "alert"


class DeliveryChannel(Enum):
    """Where a notification originated."""
    LOCAL = "local"  # Scheduled on-device
    REMOTE = "remote"  # Delivered by the push provider


class RegistrationStatus(Enum):
    """Outcome of a push-token registration."""
    REGISTERED = "registered"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"
    TOKEN_UNAVAILABLE = "token_unavailable"
    PERSISTENCE_FAILED = "persistence_failed"


@dataclass
class NotificationConfig:
    """Notification subsystem configuration."""

    # Reported to the user profile on registration
    app_version: str = "1.0.0"

    # Foreground presentation
    show_alert: bool = True
    play_sound: bool = True
    set_badge: bool = False

    # Persist notifications pushed from the backend when they arrive
    persist_remote: bool = True

    # Key carrying the kind inside platform content data
    kind_data_key: str = "type"

    @classmethod
    def from_settings(cls, settings) -> "NotificationConfig":
        return cls(
            app_version=settings.app_version,
            persist_remote=settings.persist_remote_notifications,
        )

    def presentation(self) -> dict:
        """Foreground presentation options handed to the platform."""
        return {
            "should_show_alert": self.show_alert,
            "should_play_sound": self.play_sound,
            "should_set_badge": self.set_badge,
        }


DEFAULT_NOTIFICATION_CONFIG = NotificationConfig()


# Kind-specific display hints consumed by the listing UI
KIND_CONFIGS: dict[NotificationKind, dict] = {
    NotificationKind.SIGNAL: {
        "description": "New, updated and closed trading signals",
        "icon": "trending_up",
        "color_role": "primary",
    },
    NotificationKind.ACHIEVEMENT: {
        "description": "Streaks and milestones",
        "icon": "award",
        "color_role": "warning",
    },
    NotificationKind.ANNOUNCEMENT: {
        "description": "Market updates and app announcements",
        "icon": "bell",
        "color_role": "secondary",
    },
    NotificationKind.ALERT: {
        "description": "Stop-loss hits and risk warnings",
        "icon": "alert_circle",
        "color_role": "error",
    },
}
