"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like staff users, the menu, settings and orders.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from menu.models import Addon, Category, MenuItem, PrepStation
from orders.models import Order
from settings.services import SettingsService
from users.models import User

TEST_PIN = "1234"


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def owner(db):
    """Create the restaurant owner"""
    return User.objects.create_user(
        username="owner", pin=TEST_PIN, full_name="Abebe Owner", role=User.Role.OWNER
    )


@pytest.fixture
def waitress(db):
    """Create a waitress"""
    return User.objects.create_user(
        username="hana", pin=TEST_PIN, full_name="Hana Waitress", role=User.Role.WAITRESS
    )


@pytest.fixture
def other_waitress(db):
    """Create a second waitress for ownership checks"""
    return User.objects.create_user(
        username="sara", pin="4321", full_name="Sara Waitress", role=User.Role.WAITRESS
    )


@pytest.fixture
def kitchen_user(db):
    """Create the kitchen station account"""
    return User.objects.create_user(
        username="kitchen", pin=TEST_PIN, full_name="Kitchen", role=User.Role.KITCHEN
    )


@pytest.fixture
def juicebar_user(db):
    """Create the juice bar station account"""
    return User.objects.create_user(
        username="juicebar", pin=TEST_PIN, full_name="Juice Bar", role=User.Role.JUICEBAR
    )


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================

@pytest.fixture
def restaurant_settings(db):
    """Settings singleton with the default 3 minute grace window"""
    return SettingsService.get_settings()


# ============================================================================
# MENU FIXTURES
# ============================================================================

@pytest.fixture
def food_category(db):
    return Category.objects.create(
        name_en="Main Dishes", name_am="ዋና ምግቦች", prep_station=PrepStation.KITCHEN
    )


@pytest.fixture
def drinks_category(db):
    return Category.objects.create(
        name_en="Juices", name_am="ጭማቂዎች", prep_station=PrepStation.JUICEBAR
    )


@pytest.fixture
def bottled_category(db):
    return Category.objects.create(
        name_en="Bottled Drinks",
        name_am="የታሸጉ መጠጦች",
        prep_station=PrepStation.NONE,
        requires_preparation=False,
    )


@pytest.fixture
def burger(food_category):
    """Kitchen item, 10.00 dine-in / 9.00 takeaway"""
    return MenuItem.objects.create(
        name_en="Burger",
        name_am="በርገር",
        category=food_category,
        price_dine_in=Decimal("10.00"),
        price_takeaway=Decimal("9.00"),
        prep_station=PrepStation.KITCHEN,
    )


@pytest.fixture
def juice(drinks_category):
    """Juice bar item, 4.00 dine-in / 3.50 takeaway"""
    return MenuItem.objects.create(
        name_en="Mango Juice",
        name_am="የማንጎ ጭማቂ",
        category=drinks_category,
        price_dine_in=Decimal("4.00"),
        price_takeaway=Decimal("3.50"),
        prep_station=PrepStation.JUICEBAR,
    )


@pytest.fixture
def soda(bottled_category):
    """Stock tracked item that needs no preparation"""
    return MenuItem.objects.create(
        name_en="Coca Cola",
        name_am="ኮካ ኮላ",
        category=bottled_category,
        price_dine_in=Decimal("2.00"),
        price_takeaway=Decimal("2.00"),
        prep_station=PrepStation.NONE,
        requires_preparation=False,
        stock_enabled=True,
        current_stock=5,
        min_stock=2,
    )


@pytest.fixture
def cheese(db, burger):
    """Add-on offered with the burger"""
    addon = Addon.objects.create(
        name_en="Extra Cheese",
        name_am="ተጨማሪ አይብ",
        price=Decimal("1.50"),
        stations=[PrepStation.KITCHEN],
    )
    burger.add_ons.add(addon)
    return addon


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def create_order(waitress, restaurant_settings):
    """
    Factory placing an order through the lifecycle service.

    Usage:
        def test_something(create_order, burger):
            order = create_order([{"item_id": burger.pk, "quantity": 2}])
    """
    from orders.services import order_lifecycle_service

    def _create(items, order_type=Order.OrderType.DINE_IN, by=None, **kwargs):
        result = order_lifecycle_service.create_order(by or waitress, order_type, items, **kwargs)
        return result.order

    return _create


@pytest.fixture
def expire_grace_window():
    """Moves an order's grace window into the past"""

    def _expire(order):
        order.grace_window_ends_at = timezone.now() - timedelta(seconds=1)
        order.save(update_fields=["grace_window_ends_at"])
        return order

    return _expire


@pytest.fixture
def ready_order(create_order, burger, expire_grace_window):
    """Dine-in order for two burgers (20.00) that the kitchen has finished"""
    from orders.services import order_lifecycle_service

    order = create_order([{"item_id": burger.pk, "quantity": 2}])
    expire_grace_window(order)
    return order_lifecycle_service.update_order_status(order.pk, Order.Status.READY)
