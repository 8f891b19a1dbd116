"""
Order Lifecycle Tests - Priority 1

These tests verify order creation, editing inside the grace window, station
status updates and cancellation through OrderLifecycleService.

Priority: CRITICAL - Orders are the revenue-generating core of the POS system
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from core_backend.exceptions import (
    GraceWindowExpired,
    InvalidCancellationState,
    ItemNotFound,
    ItemsNotFound,
    ItemsUnavailable,
    NotOwner,
    OrderLocked,
    OrderNotFound,
    StateConflict,
    ValidationFailed,
)
from menu.models import MenuItem
from orders.models import CancellationLog, Order, OrderItem
from orders.services import OrderCalculationService, order_lifecycle_service
from reports.models import DailyAnalytics


# ============================================================================
# ORDER CREATION
# ============================================================================

@pytest.mark.django_db
class TestOrderCreation:
    """Creating orders prices lines from the menu and routes them to stations."""

    def test_totals_from_server_prices(self, create_order, burger, juice):
        """
        CRITICAL: Verify subtotals and grand total use the menu prices.

        Scenario:
        - 3 x juice (4.00 dine-in) and 1 x burger (10.00 dine-in)
        - Expected: line subtotals 12.00 / 10.00, grand total 22.00
        """
        order = create_order(
            [
                {"item_id": juice.pk, "quantity": 3},
                {"item_id": burger.pk, "quantity": 1},
            ]
        )

        subtotals = sorted(item.subtotal for item in order.items.all())
        assert subtotals == [Decimal("10.00"), Decimal("12.00")]
        assert order.grand_total == Decimal("22.00")
        assert order.subtotal == order.grand_total
        assert order.status == Order.Status.PENDING
        assert order.payment_status == Order.PaymentStatus.UNPAID
        assert all(item.status == OrderItem.ItemStatus.PENDING for item in order.items.all())

    def test_two_item_scenario_totals_eleven(self, create_order, food_category):
        """3 @ 2.00 and 1 @ 5.00 is 11.00"""
        fries = MenuItem.objects.create(
            name_en="Fries", name_am="ጥብስ", category=food_category,
            price_dine_in=Decimal("2.00"), price_takeaway=Decimal("2.00"),
        )
        salad = MenuItem.objects.create(
            name_en="Salad", name_am="ሰላጣ", category=food_category,
            price_dine_in=Decimal("5.00"), price_takeaway=Decimal("5.00"),
        )

        order = create_order(
            [{"item_id": fries.pk, "quantity": 3}, {"item_id": salad.pk, "quantity": 1}]
        )

        assert order.grand_total == Decimal("11.00")
        assert order.status == Order.Status.PENDING

    def test_takeaway_uses_takeaway_price(self, create_order, burger):
        order = create_order([{"item_id": burger.pk, "quantity": 2}], order_type=Order.OrderType.TAKEAWAY)

        assert order.grand_total == Decimal("18.00")

    def test_add_ons_priced_per_unit(self, create_order, burger, cheese):
        """Add-on prices are added once per unit ordered."""
        order = create_order([{"item_id": burger.pk, "quantity": 2, "add_ons": [cheese.pk]}])

        item = order.items.get()
        assert item.subtotal == Decimal("23.00")
        add_on = item.add_ons.get()
        assert add_on.addon_id == cheese.pk
        assert add_on.price == Decimal("1.50")

    def test_snapshot_survives_menu_changes(self, create_order, burger):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])

        burger.name_en = "Cheeseburger"
        burger.price_dine_in = Decimal("99.00")
        burger.save()

        item = order.items.get()
        assert item.name_en == "Burger"
        assert item.price_per_unit == Decimal("10.00")

    def test_order_numbers_increase_per_day(self, create_order, burger):
        first = create_order([{"item_id": burger.pk, "quantity": 1}])
        second = create_order([{"item_id": burger.pk, "quantity": 1}])

        today = timezone.localdate().strftime("%Y%m%d")
        assert first.order_number == f"ORD-{today}-0001"
        assert second.order_number == f"ORD-{today}-0002"

    def test_grace_window_from_settings(self, create_order, burger, restaurant_settings):
        restaurant_settings.grace_window_minutes = 5
        restaurant_settings.save()

        before = timezone.now()
        order = create_order([{"item_id": burger.pk, "quantity": 1}])

        assert before + timedelta(minutes=5) <= order.grace_window_ends_at
        assert order.grace_window_ends_at <= timezone.now() + timedelta(minutes=5)
        assert order.within_grace_window()

    def test_no_preparation_items_are_ready(self, create_order, burger, soda):
        order = create_order(
            [{"item_id": burger.pk, "quantity": 1}, {"item_id": soda.pk, "quantity": 1}]
        )

        soda_line = order.items.get(menu_item=soda)
        burger_line = order.items.get(menu_item=burger)
        assert soda_line.status == OrderItem.ItemStatus.READY
        assert soda_line.auto_complete and soda_line.skip_kitchen
        assert burger_line.status == OrderItem.ItemStatus.PENDING
        assert order.status == Order.Status.PENDING

    def test_unknown_item_rejected_before_writes(self, create_order, burger):
        with pytest.raises(ItemsNotFound) as exc_info:
            create_order(
                [{"item_id": burger.pk, "quantity": 1}, {"item_id": 999999, "quantity": 1}]
            )

        assert exc_info.value.missing_ids == ["999999"]
        assert Order.objects.count() == 0

    def test_unavailable_item_rejected(self, create_order, burger):
        burger.available = False
        burger.save()

        with pytest.raises(ItemsUnavailable) as exc_info:
            create_order([{"item_id": burger.pk, "quantity": 1}])

        assert "Burger" in exc_info.value.message
        assert Order.objects.count() == 0

    def test_unknown_add_on_rejected(self, create_order, burger):
        with pytest.raises(ValidationFailed):
            create_order([{"item_id": burger.pk, "quantity": 1, "add_ons": [424242]}])

    def test_failed_save_logs_deducted_stock(self, create_order, soda, monkeypatch, caplog):
        """
        HIGH: Verify stock taken for an order that could not be saved is
        reported at error level.

        Scenario:
        - Saving the order fails after 2 sodas were deducted
        - Expected: the error propagates, stock stays at 3, an error names it
        """
        def fail(*args, **kwargs):
            raise StateConflict("Failed to allocate a unique order number")

        monkeypatch.setattr(order_lifecycle_service, "_persist_new_order", fail)

        with caplog.at_level("ERROR", logger="orders.services.order_service"):
            with pytest.raises(StateConflict):
                create_order([{"item_id": soda.pk, "quantity": 2}])

        soda.refresh_from_db()
        assert soda.current_stock == 3
        assert Order.objects.count() == 0
        assert "Coca Cola -2" in caplog.text

    def test_stock_deducted_and_low_stock_reported(self, waitress, restaurant_settings, soda, recorded_events):
        """
        HIGH: Verify ordering tracked items deducts stock and alerts the owner.

        Scenario:
        - soda has 5 in stock, min 2; order 3
        - Expected: stock 2, one deduction, one low stock alert to the owner
        """
        result = order_lifecycle_service.create_order(
            waitress, Order.OrderType.DINE_IN, [{"item_id": soda.pk, "quantity": 3}]
        )

        soda.refresh_from_db()
        assert soda.current_stock == 2
        assert [change.deducted for change in result.stock_deductions] == [3]
        assert [alert.item_id for alert in result.low_stock_alerts] == [soda.pk]
        assert recorded_events.rooms_for("low-stock-alert") == ["owner"]

    def test_stock_floors_at_zero(self, create_order, soda):
        create_order([{"item_id": soda.pk, "quantity": 8}])

        soda.refresh_from_db()
        assert soda.current_stock == 0
        assert soda.available is False

    def test_events_routed_by_station(self, create_order, burger, soda, waitress, recorded_events):
        """
        HIGH: Verify stations only hear about orders carrying their items.

        Scenario:
        - Order a kitchen item and a no-preparation item
        - Expected: kitchen gets new-order with one item, juicebar gets nothing
        """
        order = create_order(
            [{"item_id": burger.pk, "quantity": 1}, {"item_id": soda.pk, "quantity": 1}]
        )

        new_orders = recorded_events.events_named("new-order")
        assert [room for room, _ in new_orders] == ["kitchen"]
        assert [item["name_en"] for item in new_orders[0][1]["order"]["items"]] == ["Burger"]
        assert recorded_events.rooms_for("new-order-alert") == ["owner"]
        assert recorded_events.rooms_for("order-created-success") == [f"user-{waitress.pk}"]
        assert recorded_events.events_named("order-created-success")[0][1]["orderNumber"] == order.order_number

    def test_counts_created_order_in_analytics(self, create_order, burger):
        create_order([{"item_id": burger.pk, "quantity": 1}])

        assert DailyAnalytics.objects.get(date=timezone.localdate()).total_orders == 1


# ============================================================================
# EDITING
# ============================================================================

@pytest.mark.django_db
class TestOrderEditing:
    """Edits are only allowed to the owning waitress inside the grace window."""

    def test_edit_replaces_items_and_rearms_window(self, create_order, burger, juice, waitress, recorded_events):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])
        order.grace_window_ends_at = timezone.now() + timedelta(seconds=10)
        order.save(update_fields=["grace_window_ends_at"])

        edited = order_lifecycle_service.edit_order(
            order.pk, waitress, items=[{"item_id": juice.pk, "quantity": 2}], customer_name="Table 4"
        )

        assert [item.name_en for item in edited.items.all()] == ["Mango Juice"]
        assert edited.grand_total == Decimal("8.00")
        assert edited.customer_name == "Table 4"
        assert edited.grace_window_ends_at > timezone.now() + timedelta(minutes=2)
        assert sorted(recorded_events.rooms_for("order-updated")) == ["juicebar", "kitchen"]

    def test_edit_after_grace_window_rejected(self, create_order, burger, waitress, expire_grace_window):
        order = expire_grace_window(create_order([{"item_id": burger.pk, "quantity": 1}]))

        with pytest.raises(GraceWindowExpired):
            order_lifecycle_service.edit_order(order.pk, waitress, customer_name="Late")

    def test_edit_by_other_waitress_rejected(self, create_order, burger, other_waitress):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])

        with pytest.raises(NotOwner):
            order_lifecycle_service.edit_order(order.pk, other_waitress, customer_name="Mine")

    def test_edit_keeps_items_that_became_unavailable(self, create_order, burger, waitress):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])
        burger.available = False
        burger.save()

        edited = order_lifecycle_service.edit_order(
            order.pk, waitress, items=[{"item_id": burger.pk, "quantity": 3}]
        )

        assert edited.grand_total == Decimal("30.00")

    def test_edit_does_not_touch_stock(self, create_order, soda, waitress):
        order = create_order([{"item_id": soda.pk, "quantity": 1}])

        order_lifecycle_service.edit_order(order.pk, waitress, items=[{"item_id": soda.pk, "quantity": 3}])

        soda.refresh_from_db()
        assert soda.current_stock == 4

    def test_edit_terminal_order_rejected(self, create_order, burger, waitress):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])
        order_lifecycle_service.cancel_order(order.pk, waitress, "Customer left")

        with pytest.raises(OrderLocked):
            order_lifecycle_service.edit_order(order.pk, waitress, customer_name="Again")

    def test_unknown_order(self, waitress):
        with pytest.raises(OrderNotFound):
            order_lifecycle_service.edit_order("not-a-uuid", waitress, customer_name="x")


# ============================================================================
# STATION STATUS
# ============================================================================

@pytest.mark.django_db
class TestStatusUpdates:
    """Stations move items through pending, in-progress and ready."""

    def test_item_status_drives_order_status(self, create_order, burger, juice, kitchen_user, recorded_events):
        order = create_order(
            [{"item_id": burger.pk, "quantity": 1}, {"item_id": juice.pk, "quantity": 1}]
        )
        burger_line = order.items.get(menu_item=burger)
        juice_line = order.items.get(menu_item=juice)

        order = order_lifecycle_service.update_order_status(
            order.pk, "in-progress", item_id=burger_line.pk, user=kitchen_user
        )
        assert order.status == Order.Status.IN_PROGRESS

        order_lifecycle_service.update_order_status(order.pk, "ready", item_id=burger_line.pk)
        order = order_lifecycle_service.update_order_status(order.pk, "ready", item_id=juice_line.pk)
        assert order.status == Order.Status.READY
        assert recorded_events.rooms_for("order-status-update")[-1] == f"user-{order.waitress_id}"

    def test_bulk_status_sets_every_prepared_item(self, create_order, burger, soda):
        order = create_order(
            [{"item_id": burger.pk, "quantity": 1}, {"item_id": soda.pk, "quantity": 1}]
        )

        order = order_lifecycle_service.update_order_status(order.pk, "in-progress")

        assert order.status == Order.Status.IN_PROGRESS
        assert order.items.get(menu_item=burger).status == OrderItem.ItemStatus.IN_PROGRESS
        assert order.items.get(menu_item=soda).status == OrderItem.ItemStatus.READY

    def test_invalid_status_rejected(self, create_order, burger):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])

        with pytest.raises(ValidationFailed):
            order_lifecycle_service.update_order_status(order.pk, "completed")

    def test_unknown_item_rejected(self, create_order, burger):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])

        with pytest.raises(ItemNotFound):
            order_lifecycle_service.update_order_status(order.pk, "ready", item_id=987654)

    def test_cancelled_order_is_locked(self, create_order, burger, waitress):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])
        order_lifecycle_service.cancel_order(order.pk, waitress, "Mistake")

        with pytest.raises(OrderLocked):
            order_lifecycle_service.update_order_status(order.pk, "ready")


class TestAggregateStatus:
    """Order status derived from the statuses of its prepared items."""

    def test_all_ready(self):
        assert OrderCalculationService.aggregate_status(["ready", "ready"], True) == "ready"

    def test_any_in_progress(self):
        assert OrderCalculationService.aggregate_status(["pending", "in-progress"], False) == "in-progress"

    def test_ready_and_pending_is_in_progress(self):
        assert OrderCalculationService.aggregate_status(["ready", "pending"], False) == "in-progress"

    def test_all_pending_inside_grace_window(self):
        assert OrderCalculationService.aggregate_status(["pending"], True) == "pending"

    def test_all_pending_after_grace_window(self):
        assert OrderCalculationService.aggregate_status(["pending"], False) == "confirmed"

    def test_nothing_to_prepare(self):
        assert OrderCalculationService.aggregate_status([], False) == "ready"


# ============================================================================
# CANCELLATION
# ============================================================================

@pytest.mark.django_db
class TestCancellation:
    """Waste and review depend on how far preparation had gone."""

    def test_cancel_inside_grace_window_wastes_nothing(self, create_order, burger, waitress, recorded_events):
        order = create_order([{"item_id": burger.pk, "quantity": 2}])

        result = order_lifecycle_service.cancel_order(order.pk, waitress, "Changed mind")

        assert result.order.status == Order.Status.CANCELLED
        assert result.log.phase == Order.CancellationPhase.GRACE_WINDOW
        assert result.waste_cost == Decimal("0.00")
        assert result.requires_review is False
        assert sorted(recorded_events.rooms_for("order-cancelled")) == ["juicebar", "kitchen"]
        assert recorded_events.events_named("cancellation-requires-review") == []

    def test_cancel_confirmed_wastes_half(self, create_order, burger, waitress, expire_grace_window, recorded_events):
        """
        CRITICAL: Verify a confirmed 20.00 order wastes 10.00 and needs review.

        Scenario:
        - Pending order whose grace window has passed counts as confirmed
        - Expected: waste 10.00, review required, log phase confirmed
        """
        order = expire_grace_window(create_order([{"item_id": burger.pk, "quantity": 2}]))

        result = order_lifecycle_service.cancel_order(order.pk, waitress, "Customer left", details="Table 3")

        log = CancellationLog.objects.get(order=order)
        assert log.phase == Order.CancellationPhase.CONFIRMED
        assert log.waste_cost == Decimal("10.00")
        assert log.requires_review is True
        assert log.details == "Table 3"
        assert log.items_lost == [
            {"item_id": burger.pk, "item_name": "Burger", "quantity": 2, "cost": "20.00"}
        ]
        assert result.order.waste_cost == Decimal("10.00")
        assert recorded_events.rooms_for("cancellation-requires-review") == ["owner"]

    def test_cancel_in_progress_wastes_eighty_percent(self, create_order, burger, waitress, expire_grace_window):
        order = expire_grace_window(create_order([{"item_id": burger.pk, "quantity": 2}]))
        order_lifecycle_service.update_order_status(order.pk, "in-progress")

        result = order_lifecycle_service.cancel_order(order.pk, waitress, "Too slow")

        assert result.log.phase == Order.CancellationPhase.IN_PROGRESS
        assert result.waste_cost == Decimal("16.00")

    def test_cancel_ready_wastes_everything(self, ready_order, waitress):
        result = order_lifecycle_service.cancel_order(ready_order.pk, waitress, "Walked out")

        assert result.log.phase == Order.CancellationPhase.READY
        assert result.waste_cost == ready_order.grand_total

    def test_cancel_twice_rejected(self, create_order, burger, waitress):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])
        order_lifecycle_service.cancel_order(order.pk, waitress, "Mistake")

        with pytest.raises(OrderLocked):
            order_lifecycle_service.cancel_order(order.pk, waitress, "Again")

    def test_cancel_by_other_waitress_rejected(self, create_order, burger, other_waitress):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])

        with pytest.raises(NotOwner):
            order_lifecycle_service.cancel_order(order.pk, other_waitress, "Not mine")
        assert CancellationLog.objects.count() == 0

    def test_phase_rules(self, create_order, burger):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])
        later = timezone.now() + timedelta(minutes=10)

        assert order_lifecycle_service.cancellation_phase(order)[0] == Order.CancellationPhase.GRACE_WINDOW
        assert order_lifecycle_service.cancellation_phase(order, now=later) == (
            Order.CancellationPhase.CONFIRMED, 50, True
        )

        order.status = Order.Status.COMPLETED
        with pytest.raises(InvalidCancellationState):
            order_lifecycle_service.cancellation_phase(order, now=later)

    def test_cancellation_counted_in_analytics(self, create_order, burger, waitress, expire_grace_window):
        order = expire_grace_window(create_order([{"item_id": burger.pk, "quantity": 2}]))

        order_lifecycle_service.cancel_order(order.pk, waitress, "Customer left")

        day = DailyAnalytics.objects.get(date=timezone.localdate())
        assert day.cancelled_orders == 1
        assert day.total_waste_cost == Decimal("10.00")
        assert day.waitress_sales.get(waitress=waitress).cancellations == 1


@pytest.mark.django_db
class TestAcknowledgement:
    def test_station_acknowledgement_reaches_waitress(self, create_order, burger, kitchen_user, recorded_events):
        order = create_order([{"item_id": burger.pk, "quantity": 1}])

        order_lifecycle_service.acknowledge_order(order.pk, "kitchen", kitchen_user)

        (room, payload), = recorded_events.events_named("order-acknowledgement")
        assert room == f"user-{order.waitress_id}"
        assert payload["station"] == "kitchen"
        assert payload["acknowledgedBy"] == "Kitchen"
