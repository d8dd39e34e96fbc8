"""Push-token registration."""

import logging
from typing import Optional

from src.logging_config import log_performance
from src.notifications.config import (
    DEFAULT_NOTIFICATION_CONFIG,
    NotificationConfig,
    PermissionState,
    Platform,
    RegistrationStatus,
)
from src.notifications.errors import PermissionDenied, PersistenceFailure, TokenUnavailable
from src.notifications.models import RegistrationResult, UserProfile
from src.notifications.permissions import PermissionGate
from src.notifications.store import UserProfileStore

logger = logging.getLogger(__name__)


class TokenRegistrar:
    """Obtains a device push token and stores it on the user profile.

    All-or-nothing from the caller's side: a token that could not be
    stored is not reported. Never raises.
    """

    def __init__(
        self,
        gate: PermissionGate,
        profiles: UserProfileStore,
        config: Optional[NotificationConfig] = None,
    ):
        self.gate = gate
        self.profiles = profiles
        self.config = config or DEFAULT_NOTIFICATION_CONFIG

    @property
    def center(self):
        return self.gate.center

    async def register(self, user_id: str) -> RegistrationResult:
        """Register this device for push notifications for ``user_id``."""
        state = await self.gate.request_permission()
        platform = self.center.platform
        if platform == Platform.WEB or not self.gate.supported:
            # Web push needs a separate service-worker flow
            return RegistrationResult(user_id=user_id, status=RegistrationStatus.UNSUPPORTED)

        if state != PermissionState.GRANTED:
            logger.info("Notification permissions not granted")
            return RegistrationResult(
                user_id=user_id,
                status=RegistrationStatus.DENIED,
                error=PermissionDenied(f"Permission {state.value}"),
            )

        try:
            token = await self._fetch_token()
        except Exception as e:
            error = TokenUnavailable("Push token could not be obtained", cause=e)
            logger.exception("Error fetching push token", extra={"error_code": error.code})
            return RegistrationResult(
                user_id=user_id,
                status=RegistrationStatus.TOKEN_UNAVAILABLE,
                error=error,
            )

        profile = UserProfile(
            user_id=user_id,
            push_token=token,
            device_platform=platform,
            app_version=self.config.app_version,
        )
        try:
            await self.profiles.upsert_user_profile(profile.to_store_fields())
        except Exception as e:
            error = PersistenceFailure("User profile could not be updated", cause=e)
            logger.exception("Error saving push token", extra={"error_code": error.code})
            return RegistrationResult(
                user_id=user_id,
                status=RegistrationStatus.PERSISTENCE_FAILED,
                error=error,
            )

        logger.info(f"Push notification token registered for {platform.value}")
        return RegistrationResult(user_id=user_id, status=RegistrationStatus.REGISTERED, token=token)

    async def register_for_push(self, user_id: str) -> Optional[str]:
        """Register and return the token, or None on any failure."""
        result = await self.register(user_id)
        return result.token

    @log_performance()
    async def _fetch_token(self) -> str:
        token = await self.center.get_push_token()
        if not token:
            raise ValueError("Push service returned an empty token")
        return token
