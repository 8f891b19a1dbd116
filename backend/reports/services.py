"""
Daily analytics accumulation and the owner's reporting queries.

Writers never read-modify-write a counter in Python: each day row is
created once (the unique date resolves races) and then bumped with ``F()``
expressions while the day row is locked.
"""
import logging
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from core_backend.exceptions import NotFound, ValidationFailed
from orders.models import CancellationLog, Order

from .models import DailyAnalytics, HourlySales, ItemSales, WaitressSales

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
TOP_ITEMS_LIMIT = 10

# payments.services bucket -> DailyAnalytics column
METHOD_COLUMNS = {
    "cash": "cash_total",
    "card": "card_total",
    "mobile_money": "mobile_money_total",
}


def _local_day_range(date):
    start = timezone.make_aware(datetime.combine(date, time.min))
    return start, start + timedelta(days=1)


class AnalyticsService:
    """Incremental daily rollups fed by the order and payment paths."""

    @staticmethod
    def get_or_create_day(date) -> DailyAnalytics:
        """Day row for ``date``; concurrent first writers share one row."""
        try:
            return DailyAnalytics.objects.get(date=date)
        except DailyAnalytics.DoesNotExist:
            pass

        try:
            with transaction.atomic():
                return DailyAnalytics.objects.create(date=date)
        except IntegrityError:
            return DailyAnalytics.objects.get(date=date)

    @staticmethod
    def _locked_day(date) -> DailyAnalytics:
        day = AnalyticsService.get_or_create_day(date)
        return DailyAnalytics.objects.select_for_update().get(pk=day.pk)

    @staticmethod
    def _bump(model, lookup, defaults=None, **increments):
        """Creates the rollup row if needed, then adds ``increments`` to it."""
        row, _ = model.objects.get_or_create(defaults=defaults or {}, **lookup)
        model.objects.filter(pk=row.pk).update(
            **{name: F(name) + amount for name, amount in increments.items()}
        )

    @staticmethod
    def record_created_order(order):
        date = timezone.localdate(order.created_at)
        with transaction.atomic():
            day = AnalyticsService._locked_day(date)
            DailyAnalytics.objects.filter(pk=day.pk).update(total_orders=F("total_orders") + 1)

    @staticmethod
    def record_completed_order(order, payment):
        from payments.services import method_totals

        completed_at = order.completed_at or timezone.now()
        date = timezone.localdate(completed_at)
        revenue = order.grand_total

        with transaction.atomic():
            day = AnalyticsService._locked_day(date)

            updates = {
                "completed_orders": F("completed_orders") + 1,
                "total_revenue": F("total_revenue") + revenue,
            }
            for bucket, amount in method_totals(payment).items():
                if amount:
                    column = METHOD_COLUMNS[bucket]
                    updates[column] = F(column) + amount
            DailyAnalytics.objects.filter(pk=day.pk).update(**updates)

            AnalyticsService._bump(
                WaitressSales,
                {"day": day, "waitress_id": order.waitress_id},
                defaults={"waitress_name": order.waitress_name},
                orders=1,
                revenue=revenue,
            )
            AnalyticsService._bump(
                HourlySales,
                {"day": day, "hour": timezone.localtime(order.created_at).hour},
                orders=1,
                revenue=revenue,
            )
            for item in order.items.all():
                if item.menu_item_id is None:
                    continue
                AnalyticsService._bump(
                    ItemSales,
                    {"day": day, "menu_item_id": item.menu_item_id},
                    defaults={"item_name_en": item.name_en, "item_name_am": item.name_am},
                    quantity_sold=item.quantity,
                    revenue=item.subtotal,
                )

        logger.info(f"Daily analytics updated for order {order.order_number} ({date})")

    @staticmethod
    def record_cancelled_order(order, waste_cost=None):
        waste_cost = order.waste_cost if waste_cost is None else waste_cost
        date = timezone.localdate(order.cancelled_at or timezone.now())

        with transaction.atomic():
            day = AnalyticsService._locked_day(date)
            DailyAnalytics.objects.filter(pk=day.pk).update(
                cancelled_orders=F("cancelled_orders") + 1,
                total_waste_cost=F("total_waste_cost") + waste_cost,
            )
            AnalyticsService._bump(
                WaitressSales,
                {"day": day, "waitress_id": order.waitress_id},
                defaults={"waitress_name": order.waitress_name},
                cancellations=1,
            )

    @staticmethod
    def today_summary() -> dict:
        """
        Live counts for orders placed today plus today's rollup breakdowns
        (per waitress, per hour, payment methods and the best selling items).
        """
        from payments.models import Payment

        today = timezone.localdate()
        start, end = _local_day_range(today)

        counts = Order.objects.filter(created_at__gte=start, created_at__lt=end).aggregate(
            total=Count("id"),
            completed=Count("id", filter=Q(status=Order.Status.COMPLETED)),
            cancelled=Count("id", filter=Q(status=Order.Status.CANCELLED)),
            active=Count("id", filter=Q(status__in=Order.ACTIVE_STATUSES)),
        )
        revenue = (
            Payment.objects.filter(created_at__gte=start, created_at__lt=end)
            .aggregate(total=Sum("total_amount"))["total"]
            or ZERO
        )
        completed = counts["completed"]
        average = (revenue / completed).quantize(Decimal("0.01")) if completed else ZERO

        day = DailyAnalytics.objects.filter(date=today).first()
        return {
            "date": today,
            "summary": {
                "total_orders": counts["total"],
                "completed_orders": completed,
                "cancelled_orders": counts["cancelled"],
                "active_orders": counts["active"],
                "total_revenue": revenue,
                "average_order_value": average,
                "customer_count": counts["total"],
            },
            "analytics": AnalyticsService._rollups(day),
        }

    @staticmethod
    def _rollups(day) -> dict:
        if day is None:
            return {
                "total_waste_cost": ZERO,
                "sales_by_waitress": [],
                "sales_by_hour": [],
                "payment_methods": {"cash": ZERO, "card": ZERO, "mobile_money": ZERO},
                "top_items": [],
            }
        return {
            "total_waste_cost": day.total_waste_cost,
            "sales_by_waitress": list(day.waitress_sales.all()),
            "sales_by_hour": list(day.hourly_sales.all()),
            "payment_methods": {
                "cash": day.cash_total,
                "card": day.card_total,
                "mobile_money": day.mobile_money_total,
            },
            "top_items": list(day.item_sales.all()[:TOP_ITEMS_LIMIT]),
        }

    @staticmethod
    def list_cancellations(requires_review=None, start=None, end=None, phase=None) -> dict:
        """Cancellation logs, newest first, with a summary broken down by phase."""
        from orders.filters import CancellationLogFilter

        data = {}
        if requires_review is not None:
            data["requires_review"] = requires_review
        if start:
            data["start_date"] = start
        if end:
            data["end_date"] = end
        if phase:
            data["phase"] = phase

        queryset = CancellationLog.objects.select_related("cancelled_by", "reviewed_by").order_by(
            "-created_at"
        )
        filterset = CancellationLogFilter(data, queryset=queryset)
        if not filterset.is_valid():
            raise ValidationFailed(
                errors=[
                    {"field": field, "message": message}
                    for field, messages in filterset.errors.items()
                    for message in messages
                ]
            )
        logs = list(filterset.qs)

        by_phase = {value: 0 for value in Order.CancellationPhase.values}
        for log in logs:
            by_phase[log.phase] = by_phase.get(log.phase, 0) + 1
        summary = {
            "total": len(logs),
            "requires_review": sum(1 for log in logs if log.requires_review),
            "total_waste_cost": sum((log.waste_cost for log in logs), ZERO),
            "by_phase": by_phase,
        }
        return {"cancellations": logs, "summary": summary}

    @staticmethod
    def review_cancellation(log_id, owner) -> CancellationLog:
        with transaction.atomic():
            try:
                log = CancellationLog.objects.select_for_update().get(pk=log_id)
            except (CancellationLog.DoesNotExist, ValueError):
                raise NotFound("Cancellation log not found")
            log.requires_review = False
            log.reviewed_by = owner
            log.reviewed_at = timezone.now()
            log.save(update_fields=["requires_review", "reviewed_by", "reviewed_at"])

        logger.info(f"Cancellation {log.order_number} reviewed by {owner.username}")
        return log
