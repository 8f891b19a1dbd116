"""
Menu and Stock Tests - Priority 2

These tests verify stock counters (locking, floor at zero, availability
rule), menu maintenance through the API and the menu events the screens
listen to.
"""
from decimal import Decimal

import pytest

from core_backend.exceptions import MenuItemNotFound, StockTrackingDisabled, ValidationFailed
from menu.models import Addon, Category, MenuItem
from menu.services import StockService, menu_service

MENU_URL = "/api/menu/"


# ============================================================================
# STOCK SERVICE
# ============================================================================

@pytest.mark.django_db
class TestStockService:
    """Every counter change goes through StockService."""

    def test_deduct_for_untracked_item_is_noop(self, burger):
        assert StockService.deduct_for_order(burger.pk, 3) is None

    def test_deduct_reports_change(self, soda):
        change = StockService.deduct_for_order(soda.pk, 2)

        assert (change.previous_stock, change.new_stock, change.deducted) == (5, 3, 2)
        assert change.available is True
        assert change.low_stock is False

    def test_deduct_to_min_stock_alerts(self, soda):
        change = StockService.deduct_for_order(soda.pk, 3)

        assert change.low_stock_alert.as_event() == {
            "itemId": soda.pk,
            "itemName": {"en": "Coca Cola", "am": "ኮካ ኮላ"},
            "currentStock": 2,
            "minStock": 2,
            "unit": "pieces",
        }

    def test_depleted_item_becomes_unavailable(self, soda):
        change = StockService.deduct_for_order(soda.pk, 99)

        soda.refresh_from_db()
        assert change.new_stock == 0
        assert soda.current_stock == 0
        assert soda.available is False

    def test_restock_makes_item_available(self, soda):
        StockService.deduct_for_order(soda.pk, 5)

        change = StockService.adjust(soda.pk, StockService.ADD, 10)

        soda.refresh_from_db()
        assert change.new_stock == 10
        assert soda.available is True

    def test_remove_floors_at_zero(self, soda):
        change = StockService.adjust(soda.pk, StockService.REMOVE, 50)

        assert change.new_stock == 0
        assert change.available is False

    def test_set(self, soda):
        assert StockService.adjust(soda.pk, StockService.SET, 42).new_stock == 42

    def test_adjust_untracked_item(self, burger):
        with pytest.raises(StockTrackingDisabled):
            StockService.adjust(burger.pk, StockService.ADD, 1)

    def test_adjust_invalid_action(self, soda):
        with pytest.raises(ValidationFailed):
            StockService.adjust(soda.pk, "double", 1)

    def test_adjust_unknown_item(self, db):
        with pytest.raises(MenuItemNotFound):
            StockService.adjust(123456, StockService.ADD, 1)

    def test_deduct_many_skips_unknown_items(self, soda, recorded_events):
        changes, alerts = StockService.deduct_many(
            [{"item_id": 123456, "quantity": 1}, {"item_id": soda.pk, "quantity": 4}]
        )

        assert [change.item_id for change in changes] == [soda.pk]
        assert len(alerts) == 1
        assert recorded_events.rooms_for("low-stock-alert") == ["owner"]

    def test_tracked_item_saved_at_zero_is_unavailable(self, bottled_category):
        item = MenuItem.objects.create(
            name_en="Water", name_am="ውሃ", category=bottled_category,
            price_dine_in=Decimal("1.00"), price_takeaway=Decimal("1.00"),
            stock_enabled=True, current_stock=0, available=True,
        )

        assert item.available is False


# ============================================================================
# MENU SERVICE
# ============================================================================

@pytest.mark.django_db
class TestMenuService:
    def test_new_item_takeaway_price_follows_policy(self, restaurant_settings, food_category, owner):
        restaurant_settings.takeaway_policy = "percentage-discount"
        restaurant_settings.takeaway_discount_percentage = Decimal("10")
        restaurant_settings.save()

        item = menu_service.create_item(
            {
                "name_en": "Pasta",
                "name_am": "ፓስታ",
                "category": food_category,
                "price_dine_in": Decimal("12.00"),
            },
            owner,
        )

        assert item.price_takeaway == Decimal("10.80")

    def test_category_in_use_cannot_be_deleted(self, food_category, burger, owner):
        from core_backend.exceptions import ReferencedResource

        with pytest.raises(ReferencedResource):
            menu_service.delete_category(food_category, owner)
        assert Category.objects.filter(pk=food_category.pk).exists()

    def test_addon_in_use_cannot_be_deleted(self, cheese, owner):
        from core_backend.exceptions import ReferencedResource

        with pytest.raises(ReferencedResource):
            menu_service.delete_addon(cheese, owner)

    def test_stock_sale_does_not_flip_manual_override(self, soda, owner):
        menu_service.set_availability(soda, False, owner)

        StockService.deduct_for_order(soda.pk, 1)

        soda.refresh_from_db()
        assert soda.available is False


# ============================================================================
# API
# ============================================================================

@pytest.mark.django_db
class TestMenuEndpoints:
    """/api/menu/ endpoints"""

    def test_everyone_reads_active_menu(self, kitchen_client, burger, juice):
        juice.available = False
        juice.save()

        response = kitchen_client.get(f"{MENU_URL}items/active/")

        assert response.status_code == 200
        assert [item["name_en"] for item in response.json()["data"]] == ["Burger"]

    def test_active_menu_filters_by_station(self, waitress_client, burger, juice):
        response = waitress_client.get(f"{MENU_URL}items/active/", {"prep_station": "juicebar"})

        assert [item["id"] for item in response.json()["data"]] == [juice.pk]

    def test_full_item_list_is_owner_only(self, owner_client, waitress_client, burger):
        assert waitress_client.get(f"{MENU_URL}items/").status_code == 403

        response = owner_client.get(f"{MENU_URL}items/")
        assert response.json()["count"] == 1

    def test_owner_creates_item(self, owner_client, restaurant_settings, food_category, cheese, recorded_events):
        response = owner_client.post(
            f"{MENU_URL}items/",
            {
                "name_en": "Tibs",
                "name_am": "ጥብስ",
                "category": food_category.pk,
                "price_dine_in": "15.00",
                "add_ons": [cheese.pk],
            },
            format="json",
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["price_takeaway"] == "15.00"
        assert [addon["id"] for addon in data["add_ons"]] == [cheese.pk]
        (room, payload), = recorded_events.events_named("menu-updated")
        assert room == "broadcast"
        assert payload["action"] == "created"

    def test_negative_price_rejected(self, owner_client, food_category):
        response = owner_client.post(
            f"{MENU_URL}items/",
            {"name_en": "Bad", "name_am": "Bad", "category": food_category.pk, "price_dine_in": "-1.00"},
            format="json",
        )

        assert response.status_code == 400

    def test_station_toggles_availability(self, kitchen_client, burger):
        response = kitchen_client.patch(
            f"{MENU_URL}items/{burger.pk}/availability/", {"available": False}, format="json"
        )

        assert response.status_code == 200
        burger.refresh_from_db()
        assert burger.available is False

    def test_waitress_cannot_toggle_availability(self, waitress_client, burger):
        response = waitress_client.patch(
            f"{MENU_URL}items/{burger.pk}/availability/", {"available": False}, format="json"
        )

        assert response.status_code == 403

    def test_owner_adjusts_stock(self, owner_client, soda, recorded_events):
        response = owner_client.patch(
            f"{MENU_URL}items/{soda.pk}/stock/", {"action": "add", "quantity": 7}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["data"]["newStock"] == 12
        assert recorded_events.events_named("menu-updated")[0][1]["action"] == "stock-updated"

    def test_stock_on_untracked_item_conflicts(self, owner_client, burger):
        response = owner_client.patch(
            f"{MENU_URL}items/{burger.pk}/stock/", {"action": "add", "quantity": 1}, format="json"
        )

        assert response.status_code == 409
        assert response.json()["code"] == "stock_tracking_disabled"

    def test_deduct_endpoint(self, waitress_client, soda):
        response = waitress_client.post(
            f"{MENU_URL}items/stock/deduct/",
            {"items": [{"item_id": soda.pk, "quantity": 3}]},
            format="json",
        )

        assert response.status_code == 200
        body = response.json()
        assert body["data"][0]["newStock"] == 2
        assert [alert["itemId"] for alert in body["low_stock_alerts"]] == [soda.pk]

    def test_category_crud(self, owner_client, waitress_client, recorded_events):
        created = owner_client.post(
            f"{MENU_URL}categories/",
            {"name_en": "Breakfast", "name_am": "ቁርስ", "prep_station": "kitchen"},
            format="json",
        )
        assert created.status_code == 201
        category_id = created.json()["data"]["id"]

        assert waitress_client.get(f"{MENU_URL}categories/").json()["data"][0]["name_en"] == "Breakfast"

        updated = owner_client.patch(
            f"{MENU_URL}categories/{category_id}/", {"name_en": "Brunch"}, format="json"
        )
        assert updated.json()["data"]["name_en"] == "Brunch"

        assert owner_client.delete(f"{MENU_URL}categories/{category_id}/").status_code == 200
        assert [name for name in ("category-added", "category-updated", "category-deleted")
                if recorded_events.events_named(name)] == [
            "category-added", "category-updated", "category-deleted"
        ]

    def test_delete_category_in_use_conflicts(self, owner_client, food_category, burger):
        response = owner_client.delete(f"{MENU_URL}categories/{food_category.pk}/")

        assert response.status_code == 409
        assert response.json()["code"] == "referenced_resource"

    def test_addons_filtered_by_station(self, waitress_client, cheese):
        Addon.objects.create(name_en="Ice", name_am="በረዶ", price=Decimal("0.00"), stations=["juicebar"])

        response = waitress_client.get(f"{MENU_URL}addons/", {"station": "juicebar"})

        assert [addon["name_en"] for addon in response.json()["data"]] == ["Ice"]

    def test_waitress_cannot_create_addon(self, waitress_client):
        response = waitress_client.post(
            f"{MENU_URL}addons/", {"name_en": "X", "name_am": "X", "price": "1.00"}, format="json"
        )

        assert response.status_code == 403
