"""Notification Error Hierarchy.

Typed failures raised inside the notification subsystem. None of them
escape a public entry point: components catch them at the boundary,
log them, and report them through typed results.
"""

from typing import Optional


class NotificationError(Exception):
    """Base exception for notification failures.

    Attributes:
        code: Stable machine-readable error code.
        retryable: Whether the caller may retry later.
    """

    code = "notification_error"
    retryable = False

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "cause": type(self.cause).__name__ if self.cause else None,
        }


class PermissionDenied(NotificationError):
    """Notification permission is not granted."""

    code = "permission_denied"


class TokenUnavailable(NotificationError):
    """The push service did not issue a device token."""

    code = "token_unavailable"
    retryable = True


class PersistenceFailure(NotificationError):
    """A store call failed."""

    code = "persistence_failure"
    retryable = True


class DisplayFailure(NotificationError):
    """The platform refused to show a notification."""

    code = "display_failure"


class InvalidNotification(ValueError):
    """Notification input failed validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class UnknownNotificationKind(InvalidNotification):
    """Kind outside the closed set of notification kinds."""

    def __init__(self, kind: object):
        super().__init__(f"Unknown notification kind: {kind!r}", field="kind")
        self.kind = kind
