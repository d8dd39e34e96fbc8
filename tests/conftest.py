"""Pytest configuration and shared fixtures."""

import logging
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.notifications import (  # noqa: E402
    InMemoryNotificationStore,
    InMemoryUserProfileStore,
    ListenerHub,
    NotificationDispatcher,
    PermissionGate,
    SimulatedNotificationCenter,
    TokenRegistrar,
)
import src.logging_config.setup as logging_setup  # noqa: E402
from src.settings import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings():
    """Clear cached settings, root handlers and the active logging config around each test."""
    get_settings.cache_clear()
    active = logging_setup._active_config
    handlers = logging.getLogger().handlers[:]
    level = logging.getLogger().level
    yield
    get_settings.cache_clear()
    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging_setup._active_config = active


@pytest.fixture
def center():
    return SimulatedNotificationCenter()


@pytest.fixture
def notification_store():
    return InMemoryNotificationStore()


@pytest.fixture
def profile_store():
    return InMemoryUserProfileStore()


@pytest.fixture
def gate(center):
    return PermissionGate(center)


@pytest.fixture
def registrar(gate, profile_store):
    return TokenRegistrar(gate, profile_store)


@pytest.fixture
def dispatcher(center, notification_store):
    return NotificationDispatcher(center, notification_store)


@pytest.fixture
def hub(center, dispatcher):
    return ListenerHub(center, dispatcher)
