import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import (
    AlreadyPaid,
    InsufficientPayment,
    NotOwner,
    OrderNotFound,
    OrderNotReady,
    SplitMismatch,
    ValidationFailed,
)
from orders.models import Order
from orders.services import OrderNotificationService

from .models import Payment, PaymentMethod, SplitPayment
from .money import calculate_change_breakdown, quantize, within_tolerance

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = (Order.Status.READY, Order.Status.COMPLETED)

# Analytics bucket each concrete method is credited to
METHOD_BUCKETS = {
    PaymentMethod.CASH: "cash",
    PaymentMethod.CARD: "card",
    PaymentMethod.MOBILE_MONEY: "mobile_money",
}


@dataclass
class PaymentResult:
    payment: Payment
    order: Order
    change_breakdown: List[dict] = field(default_factory=list)

    @property
    def change(self) -> Optional[dict]:
        if self.payment.change_due <= 0:
            return None
        return {"amount": self.payment.change_due, "breakdown": self.change_breakdown}


def method_totals(payment) -> dict:
    """
    ``{"cash", "card", "mobile_money"}`` amounts credited by ``payment``.
    Split payments credit each line to its own method.
    """
    totals = {bucket: Decimal("0.00") for bucket in METHOD_BUCKETS.values()}
    if payment.payment_method == PaymentMethod.SPLIT:
        for line in payment.split_payments.all():
            totals[METHOD_BUCKETS[line.method]] += line.amount
    else:
        totals[METHOD_BUCKETS[payment.payment_method]] += payment.total_amount
    return totals


class PaymentService:
    """
    Settles ready orders. Payment completes the order, feeds the daily
    analytics and tells the owner.
    """

    def __init__(self, broadcaster=None):
        self.notifier = OrderNotificationService(broadcaster)

    @staticmethod
    def _locked_order(order_id) -> Order:
        try:
            return Order.objects.select_for_update().get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError):
            raise OrderNotFound()

    @staticmethod
    def _amounts(order, method, amount_received, split_payments):
        """Returns ``(amount_received, change_due)`` or raises."""
        total = order.grand_total
        if method == PaymentMethod.SPLIT:
            if not split_payments:
                raise ValidationFailed(
                    "Split payments are required for split method",
                    errors=[{"field": "split_payments", "message": "This field is required."}],
                )
            split_total = quantize(sum((Decimal(line["amount"]) for line in split_payments), Decimal("0")))
            if not within_tolerance(split_total, total):
                raise SplitMismatch(
                    f"Split payments total ({split_total}) does not match order total ({total})"
                )
            return split_total, Decimal("0.00")

        paid = quantize(amount_received) if amount_received is not None else total
        if method == PaymentMethod.CASH:
            if paid < total:
                raise InsufficientPayment()
            return paid, quantize(paid - total)
        return paid, Decimal("0.00")

    def process_payment(
        self,
        order_id,
        waitress,
        method,
        amount_received=None,
        split_payments=None,
        transaction_id="",
    ) -> PaymentResult:
        with transaction.atomic():
            order = self._locked_order(order_id)
            if order.waitress_id != waitress.pk:
                raise NotOwner("Not authorized to process payment for this order")
            if order.status not in PAYABLE_STATUSES:
                raise OrderNotReady()
            if Payment.objects.filter(order=order).exists():
                raise AlreadyPaid()

            received, change_due = self._amounts(order, method, amount_received, split_payments)
            payment = Payment.objects.create(
                order=order,
                order_number=order.order_number,
                payment_method=method,
                total_amount=order.grand_total,
                amount_received=received,
                change_due=change_due,
                transaction_id=transaction_id or "",
                waitress=waitress,
            )
            if method == PaymentMethod.SPLIT:
                SplitPayment.objects.bulk_create(
                    [
                        SplitPayment(payment=payment, method=line["method"], amount=quantize(line["amount"]))
                        for line in split_payments
                    ]
                )

            order.status = Order.Status.COMPLETED
            order.payment_status = Order.PaymentStatus.PAID
            order.completed_at = timezone.now()
            order.save(update_fields=["status", "payment_status", "completed_at", "updated_at"])

        logger.info(f"Payment processed for order {order.order_number} by {waitress.username}")
        self._record_analytics(order, payment)
        self.notifier.order_completed(order, payment)
        return PaymentResult(
            payment=payment,
            order=order,
            change_breakdown=calculate_change_breakdown(change_due),
        )

    @staticmethod
    def _record_analytics(order, payment):
        from reports.services import AnalyticsService

        try:
            AnalyticsService.record_completed_order(order, payment)
        except Exception as e:
            logger.error(
                f"Daily analytics update failed for order {order.order_number}: {e}",
                exc_info=True,
            )

    @staticmethod
    def daily_summary(date=None) -> dict:
        """Payments taken on ``date`` (local calendar day) and their totals."""
        date = date or timezone.localdate()
        start = timezone.make_aware(datetime.combine(date, time.min))
        end = start + timedelta(days=1)
        payments = list(
            Payment.objects.filter(created_at__gte=start, created_at__lt=end)
            .select_related("waitress", "order")
            .prefetch_related("split_payments")
            .order_by("-created_at")
        )

        summary = {
            "total": Decimal("0.00"),
            "count": len(payments),
            "cash": Decimal("0.00"),
            "card": Decimal("0.00"),
            "mobile_money": Decimal("0.00"),
        }
        for payment in payments:
            summary["total"] += payment.total_amount
            for bucket, amount in method_totals(payment).items():
                summary[bucket] += amount
        return {"date": date, "payments": payments, "summary": summary}


payment_service = PaymentService()
