"""CLI entry point: python main.py --user-id demo-user --platform ios"""

import argparse
import asyncio
import sys

from src.db import create_tables, get_async_engine
from src.logging_config import LogFormat, LoggingConfig, LogLevel, configure_logging
from src.notifications import (
    NotificationConfig,
    NotificationKind,
    NotificationSession,
    PermissionState,
    Platform,
    SimulatedNotificationCenter,
    SqlNotificationStore,
    SqlUserProfileStore,
    TapRouter,
)
from src.settings import get_settings


async def run_demo(args: argparse.Namespace) -> int:
    settings = get_settings()
    engine = get_async_engine(args.database_url or settings.database_url)
    await create_tables(engine)

    center = SimulatedNotificationCenter(
        platform=Platform(args.platform or settings.device_platform),
        grant_on_request=not args.deny,
    )
    config = NotificationConfig.from_settings(settings)
    session = NotificationSession(
        center,
        notifications=SqlNotificationStore(engine),
        profiles=SqlUserProfileStore(engine),
        config=config,
    )

    router = TapRouter().on(
        NotificationKind.SIGNAL,
        lambda payload: print(f"Navigate to signal: {payload.signal_id}"),
    )

    try:
        async with session, session.attached(on_opened=router):
            result = await session.register(args.user_id)
            print(f"Registration: {result.status.value}")
            if result.token and args.verbose:
                print(f"  token: {result.token}")

            if center.permission == PermissionState.GRANTED:
                dispatched = await session.send_test_notification()
                if dispatched.displayed and dispatched.platform_id:
                    await center.tap(dispatched.platform_id)

            records = await session.notifications.list_notifications()
            unread = await session.notifications.unread_count()
            print(f"\nNotifications ({unread} unread):")
            for record in records:
                marker = "*" if not record.read else " "
                print(f" {marker} [{record.kind.value}] {record.title} - {record.message} ({record.time_ago()})")
    finally:
        await engine.dispose()

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="tradealerts - run a simulated notification session"
    )
    parser.add_argument(
        "--user-id", required=True,
        help="User to register the device for"
    )
    parser.add_argument(
        "--platform", choices=[p.value for p in Platform], default=None,
        help="Device platform (default: TRADEALERTS_DEVICE_PLATFORM)"
    )
    parser.add_argument(
        "--deny", action="store_true",
        help="Decline the permission prompt"
    )
    parser.add_argument(
        "--database-url", default=None,
        help="SQLAlchemy async URL (default: TRADEALERTS_DATABASE_URL)"
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Console logging at DEBUG level and print the push token"
    )
    args = parser.parse_args()

    settings = get_settings()
    log_config = LoggingConfig.from_settings(settings)
    if args.verbose:
        log_config = LoggingConfig(level=LogLevel.DEBUG, format=LogFormat.CONSOLE)
    configure_logging(log_config)

    sys.exit(asyncio.run(run_demo(args)))


if __name__ == "__main__":
    main()
