"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from notifications.services import RecordingBroadcaster

# Modules that fall back to the global broadcaster when none is passed in
DEFAULT_BROADCASTER_MODULES = (
    "users.services",
    "settings.services",
    "menu.services.stock_service",
    "orders.services.notification_service",
)


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test so rate limit counters never leak between
    tests.
    """
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def recorded_events(monkeypatch):
    """
    Swap every broadcaster for a RecordingBroadcaster.

    Usage:
        def test_create(recorded_events):
            ...
            assert recorded_events.rooms_for("new-order") == ["kitchen"]
    """
    recorder = RecordingBroadcaster()
    for module in DEFAULT_BROADCASTER_MODULES:
        monkeypatch.setattr(f"{module}.default_broadcaster", recorder)

    from menu.services import menu_service
    from orders.services import order_lifecycle_service
    from payments.services import payment_service

    monkeypatch.setattr(menu_service, "broadcaster", recorder)
    monkeypatch.setattr(order_lifecycle_service.notifier, "broadcaster", recorder)
    monkeypatch.setattr(payment_service.notifier, "broadcaster", recorder)
    return recorder


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Unauthenticated DRF test client.

    Usage:
        def test_health(api_client):
            response = api_client.get('/api/health/')
    """
    return APIClient()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def owner_client(owner):
    return _client_for(owner)


@pytest.fixture
def waitress_client(waitress):
    return _client_for(waitress)


@pytest.fixture
def other_waitress_client(other_waitress):
    return _client_for(other_waitress)


@pytest.fixture
def kitchen_client(kitchen_user):
    return _client_for(kitchen_user)


@pytest.fixture
def juicebar_client(juicebar_user):
    return _client_for(juicebar_user)


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *  # noqa: E402,F401,F403
