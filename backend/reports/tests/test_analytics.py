"""
Analytics Tests - Priority 2

These tests verify the owner's dashboards: today's live summary and daily
rollups, the cancellation review queue and the PIN protected reset.
"""
from decimal import Decimal

import pytest
from django.utils import timezone

from core_backend.exceptions import NotFound
from orders.models import CancellationLog
from orders.services import order_lifecycle_service
from payments.models import PaymentMethod
from payments.services import payment_service
from reports.models import DailyAnalytics, HourlySales
from reports.services import AnalyticsService

ANALYTICS_URL = "/api/analytics/"


@pytest.fixture
def cancelled_orders(create_order, burger, waitress, expire_grace_window):
    """One free grace window cancellation and one confirmed cancellation."""
    free = create_order([{"item_id": burger.pk, "quantity": 1}])
    order_lifecycle_service.cancel_order(free.pk, waitress, "Wrong table")

    late = expire_grace_window(create_order([{"item_id": burger.pk, "quantity": 2}]))
    order_lifecycle_service.cancel_order(late.pk, waitress, "Customer left")
    return free, late


# ============================================================================
# ROLLUPS
# ============================================================================

@pytest.mark.django_db
class TestDailyRollups:
    def test_day_row_created_once(self):
        today = timezone.localdate()

        first = AnalyticsService.get_or_create_day(today)
        second = AnalyticsService.get_or_create_day(today)

        assert first.pk == second.pk
        assert DailyAnalytics.objects.count() == 1

    def test_cancellation_rollup(self, cancelled_orders, waitress):
        """
        HIGH: Verify cancellations add to the day's counters and waste.

        Scenario:
        - One grace window cancellation (no waste)
        - One confirmed cancellation of 20.00 (50% waste)
        - Expected: 2 cancellations, waste 10.00, waitress row counts both
        """
        day = DailyAnalytics.objects.get(date=timezone.localdate())

        assert day.total_orders == 2
        assert day.cancelled_orders == 2
        assert day.total_waste_cost == Decimal("10.00")
        assert day.waitress_sales.get(waitress=waitress).cancellations == 2

    def test_completed_orders_share_hour_row(self, ready_order, create_order, burger, waitress):
        second = create_order([{"item_id": burger.pk, "quantity": 1}])
        order_lifecycle_service.update_order_status(second.pk, "ready")

        for order in (ready_order, second):
            payment_service.process_payment(order.pk, waitress, PaymentMethod.CARD)

        row = HourlySales.objects.get()
        assert (row.orders, row.revenue) == (2, Decimal("30.00"))
        day = row.day
        assert day.item_sales.get(menu_item=burger).quantity_sold == 3
        assert day.card_total == Decimal("30.00")


# ============================================================================
# TODAY SUMMARY
# ============================================================================

@pytest.mark.django_db
class TestTodaySummary:
    def test_empty_day(self, db):
        summary = AnalyticsService.today_summary()

        assert summary["summary"]["total_orders"] == 0
        assert summary["summary"]["average_order_value"] == Decimal("0.00")
        assert summary["analytics"]["top_items"] == []
        assert summary["analytics"]["payment_methods"]["cash"] == Decimal("0.00")

    def test_counts_and_revenue(self, ready_order, create_order, burger, waitress):
        """
        CRITICAL: Verify live counts match the orders placed today.

        Scenario:
        - One paid order of 20.00, one open order, one cancelled order
        - Expected: 3 total, 1 completed, 1 cancelled, 1 active, revenue 20.00
        """
        create_order([{"item_id": burger.pk, "quantity": 1}])
        doomed = create_order([{"item_id": burger.pk, "quantity": 1}])
        order_lifecycle_service.cancel_order(doomed.pk, waitress, "Duplicate")
        payment_service.process_payment(
            ready_order.pk, waitress, PaymentMethod.CASH, amount_received=Decimal("20.00")
        )

        summary = AnalyticsService.today_summary()

        assert summary["summary"] == {
            "total_orders": 3,
            "completed_orders": 1,
            "cancelled_orders": 1,
            "active_orders": 1,
            "total_revenue": Decimal("20.00"),
            "average_order_value": Decimal("20.00"),
            "customer_count": 3,
        }
        assert summary["analytics"]["payment_methods"]["cash"] == Decimal("20.00")
        assert [row.item_name_en for row in summary["analytics"]["top_items"]] == ["Burger"]

    def test_endpoint(self, owner_client, ready_order, waitress):
        payment_service.process_payment(ready_order.pk, waitress, PaymentMethod.CARD)

        response = owner_client.get(f"{ANALYTICS_URL}today/")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["date"] == timezone.localdate().isoformat()
        assert data["summary"]["total_revenue"] == "20.00"
        assert data["analytics"]["sales_by_waitress"][0]["waitress_name"] == "Hana Waitress"
        assert data["analytics"]["payment_methods"]["card"] == "20.00"

    def test_endpoint_is_owner_only(self, waitress_client, kitchen_client, db):
        assert waitress_client.get(f"{ANALYTICS_URL}today/").status_code == 403
        assert kitchen_client.get(f"{ANALYTICS_URL}today/").status_code == 403


# ============================================================================
# CANCELLATION REVIEW
# ============================================================================

@pytest.mark.django_db
class TestCancellations:
    def test_summary_by_phase(self, cancelled_orders):
        result = AnalyticsService.list_cancellations()

        assert result["summary"] == {
            "total": 2,
            "requires_review": 1,
            "total_waste_cost": Decimal("10.00"),
            "by_phase": {"grace_window": 1, "confirmed": 1, "in_progress": 0, "ready": 0},
        }
        assert result["cancellations"][0].reason == "Customer left"

    def test_filter_needing_review(self, cancelled_orders):
        result = AnalyticsService.list_cancellations(requires_review=True)

        assert [log.phase for log in result["cancellations"]] == ["confirmed"]

    def test_filter_by_phase(self, cancelled_orders):
        result = AnalyticsService.list_cancellations(phase="grace_window")

        assert [log.reason for log in result["cancellations"]] == ["Wrong table"]

    def test_review(self, cancelled_orders, owner):
        log = CancellationLog.objects.get(requires_review=True)

        reviewed = AnalyticsService.review_cancellation(log.pk, owner)

        assert reviewed.requires_review is False
        assert reviewed.reviewed_by == owner
        assert reviewed.reviewed_at is not None

    def test_review_unknown_log(self, owner):
        with pytest.raises(NotFound):
            AnalyticsService.review_cancellation(987654, owner)

    def test_list_endpoint(self, owner_client, cancelled_orders):
        response = owner_client.get(f"{ANALYTICS_URL}cancellations/", {"requires_review": "true"})

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 1
        assert body["data"][0]["waste_cost"] == "10.00"
        assert body["summary"]["total"] == 1
        assert body["summary"]["by_phase"]["confirmed"] == 1

    def test_list_endpoint_rejects_reversed_dates(self, owner_client, db):
        response = owner_client.get(
            f"{ANALYTICS_URL}cancellations/",
            {"start_date": "2026-03-02", "end_date": "2026-03-01"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "end_date"

    def test_review_endpoint(self, owner_client, cancelled_orders):
        log = CancellationLog.objects.get(requires_review=True)

        response = owner_client.patch(f"{ANALYTICS_URL}cancellations/{log.pk}/review/")

        assert response.status_code == 200
        assert response.json()["data"]["requires_review"] is False

    def test_review_endpoint_unknown_log(self, owner_client, db):
        response = owner_client.patch(f"{ANALYTICS_URL}cancellations/987654/review/")

        assert response.status_code == 404

    def test_waitress_cannot_review(self, waitress_client, cancelled_orders):
        log = CancellationLog.objects.get(requires_review=True)

        response = waitress_client.patch(f"{ANALYTICS_URL}cancellations/{log.pk}/review/")

        assert response.status_code == 403
