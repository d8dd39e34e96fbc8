"""Notification permission gate."""

import logging

from src.logging_config import log_performance
from src.notifications.config import NATIVE_PLATFORMS, PermissionState
from src.notifications.platform import NotificationCenter

logger = logging.getLogger(__name__)


class PermissionGate:
    """Queries and requests the OS notification permission.

    The platform is the source of truth: nothing is cached between
    calls. Any platform error is logged and treated as ``DENIED``.
    """

    def __init__(self, center: NotificationCenter):
        self.center = center

    @property
    def supported(self) -> bool:
        """Whether the platform has a native notification center."""
        return self.center.platform in NATIVE_PLATFORMS

    async def current_state(self) -> PermissionState:
        """Read the permission state without prompting the user."""
        if not self.supported:
            return PermissionState.DENIED
        try:
            return await self.center.get_permissions()
        except Exception:
            logger.exception("Error reading notification permissions")
            return PermissionState.DENIED

    @log_performance()
    async def request_permission(self) -> PermissionState:
        """Return the permission state, prompting the user at most once."""
        if not self.supported:
            logger.debug(f"No native notification center on {self.center.platform.value}")
            return PermissionState.DENIED

        try:
            state = await self.center.get_permissions()
            if state != PermissionState.GRANTED:
                state = await self.center.request_permissions()
        except Exception:
            logger.exception("Error requesting notification permissions")
            return PermissionState.DENIED

        if state != PermissionState.GRANTED:
            logger.info(f"Notification permission not granted: {state.value}")
        return state
