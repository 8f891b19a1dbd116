import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from core_backend.exceptions import (
    GraceWindowExpired,
    InvalidCancellationState,
    ItemNotFound,
    MenuItemNotFound,
    NotOwner,
    OrderLocked,
    OrderNotFound,
    StateConflict,
    ValidationFailed,
)
from menu.services import LowStockAlert, StockChange, StockService
from payments.money import percentage_of
from settings.services import SettingsService

from ..models import CancellationLog, Order, OrderItem, OrderItemAddOn, OrderSequence
from .calculation_service import OrderCalculationService
from .notification_service import OrderNotificationService

logger = logging.getLogger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 5

# status -> (phase, waste percentage of the grand total, owner review needed)
CANCELLATION_RULES = {
    Order.Status.CONFIRMED: (Order.CancellationPhase.CONFIRMED, 50, True),
    Order.Status.IN_PROGRESS: (Order.CancellationPhase.IN_PROGRESS, 80, True),
    Order.Status.READY: (Order.CancellationPhase.READY, 100, True),
}


@dataclass
class OrderCreationResult:
    order: Order
    stock_deductions: List[StockChange] = field(default_factory=list)
    low_stock_alerts: List[LowStockAlert] = field(default_factory=list)


@dataclass
class CancellationResult:
    order: Order
    log: CancellationLog

    @property
    def requires_review(self):
        return self.log.requires_review

    @property
    def waste_cost(self):
        return self.log.waste_cost


class OrderLifecycleService:
    """
    Drives an order from creation through the grace window and station
    preparation to cancellation. Payment lives in ``payments.services``.

    Every mutation of an existing order holds the order row lock for its
    whole read-modify-write. Events are published once the data is
    committed and never fail the operation.
    """

    def __init__(self, broadcaster=None):
        self.notifier = OrderNotificationService(broadcaster)

    @property
    def broadcaster(self):
        return self.notifier.broadcaster

    # --- helpers ------------------------------------------------------------

    @staticmethod
    def _locked(order_id) -> Order:
        try:
            return Order.objects.select_for_update().get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError):
            raise OrderNotFound()

    @staticmethod
    def _grace_window_end():
        return timezone.now() + timedelta(minutes=SettingsService.grace_window_minutes())

    @staticmethod
    def _save_lines(order, priced_lines):
        for line in priced_lines:
            item = line.to_order_item(order)
            item.save()
            OrderItemAddOn.objects.bulk_create(
                [
                    OrderItemAddOn(
                        order_item=item,
                        addon_id=addon.addon_id,
                        name_en=addon.name_en,
                        name_am=addon.name_am,
                        price=addon.price,
                    )
                    for addon in line.add_ons
                ]
            )

    @staticmethod
    def _record_analytics(method_name, *args):
        from reports.services import AnalyticsService

        try:
            getattr(AnalyticsService, method_name)(*args)
        except Exception as e:
            logger.error(f"Analytics update '{method_name}' failed: {e}", exc_info=True)

    # --- create -------------------------------------------------------------

    def create_order(
        self, waitress, order_type, items, customer_name="", customer_phone=""
    ) -> OrderCreationResult:
        priced = OrderCalculationService.price_lines(items, order_type)

        # Each deduction commits on its own: a later failure does not give
        # back stock already taken for earlier lines.
        deductions, alerts = [], []
        for line in priced:
            try:
                change = StockService.deduct_for_order(line.menu_item.pk, line.quantity)
            except MenuItemNotFound:
                logger.warning(f"Menu item {line.menu_item.pk} vanished before stock deduction")
                continue
            if change is None:
                continue
            deductions.append(change)
            if change.low_stock:
                alerts.append(change.low_stock_alert)

        total = OrderCalculationService.total(priced)
        try:
            order = self._persist_new_order(
                waitress=waitress,
                order_type=order_type,
                customer_name=customer_name or "",
                customer_phone=customer_phone or "",
                priced=priced,
                total=total,
            )
        except Exception:
            # Stock taken above stays deducted; the owner has to adjust it back.
            if deductions:
                logger.error(
                    f"Order by {waitress.username} was not saved after stock was deducted: "
                    + ", ".join(f"{c.name} -{c.previous_stock - c.new_stock}" for c in deductions),
                    exc_info=True,
                )
            raise
        logger.info(f"Order {order.order_number} created by {waitress.username}")
        if deductions:
            logger.info(
                f"Stock deductions for {order.order_number}: "
                + ", ".join(f"{c.name} {c.previous_stock}->{c.new_stock}" for c in deductions)
            )

        self._record_analytics("record_created_order", order)
        self.notifier.order_created(order, deductions, alerts)
        return OrderCreationResult(order=order, stock_deductions=deductions, low_stock_alerts=alerts)

    def _persist_new_order(self, waitress, order_type, customer_name, customer_phone, priced, total):
        for attempt in range(1, MAX_ORDER_NUMBER_ATTEMPTS + 1):
            order_number = OrderSequence.next_number()
            try:
                with transaction.atomic():
                    order = Order.objects.create(
                        order_number=order_number,
                        order_type=order_type,
                        customer_name=customer_name,
                        customer_phone=customer_phone,
                        waitress=waitress,
                        waitress_name=waitress.full_name or waitress.username,
                        subtotal=total,
                        grand_total=total,
                        status=Order.Status.PENDING,
                        grace_window_ends_at=self._grace_window_end(),
                    )
                    self._save_lines(order, priced)
                return order
            except IntegrityError:
                if not Order.objects.filter(order_number=order_number).exists():
                    raise
                last_value = OrderSequence.resync()
                logger.warning(
                    f"Order number {order_number} already taken (attempt {attempt}), "
                    f"sequence moved to {last_value}"
                )
        raise StateConflict("Failed to allocate a unique order number")

    # --- edit ---------------------------------------------------------------

    def edit_order(
        self, order_id, waitress, items=None, customer_name=None, customer_phone=None
    ) -> Order:
        """
        Replaces the items and/or customer details while the grace window is
        open and re-arms the window. Stock is not re-deducted or restored.
        """
        with transaction.atomic():
            order = self._locked(order_id)
            if order.is_terminal:
                raise OrderLocked()
            if order.waitress_id != waitress.pk:
                raise NotOwner("Not authorized to edit this order")
            if not order.within_grace_window():
                raise GraceWindowExpired()

            if items is not None:
                held = set(order.items.values_list("menu_item_id", flat=True))
                priced = OrderCalculationService.price_lines(
                    items, order.order_type, allow_unavailable=held
                )
                order.items.all().delete()
                self._save_lines(order, priced)
                order.subtotal = order.grand_total = OrderCalculationService.total(priced)

            if customer_name is not None:
                order.customer_name = customer_name
            if customer_phone is not None:
                order.customer_phone = customer_phone

            order.grace_window_ends_at = self._grace_window_end()
            order.save()

        logger.info(f"Order {order.order_number} edited by {waitress.username}")
        self.notifier.order_updated(order)
        return order

    # --- station status -----------------------------------------------------

    def update_order_status(self, order_id, status, item_id=None, user=None) -> Order:
        """
        With ``item_id`` sets that item and derives the order status from its
        items; without it sets every prepared item and the order itself to
        ``status``.
        """
        if status not in OrderItem.ItemStatus.values:
            raise ValidationFailed(
                f"Invalid status '{status}'",
                errors=[{"field": "status", "message": "Must be pending, in-progress or ready"}],
            )

        with transaction.atomic():
            order = self._locked(order_id)
            if order.is_terminal:
                raise OrderLocked()

            if item_id is not None:
                try:
                    item = order.items.get(pk=item_id)
                except OrderItem.DoesNotExist:
                    raise ItemNotFound()
                item.status = status
                item.save(update_fields=["status"])
                order.status = OrderCalculationService.aggregate_status(
                    order.items.filter(auto_complete=False).values_list("status", flat=True),
                    order.within_grace_window(),
                )
            else:
                order.items.filter(auto_complete=False).update(status=status)
                order.status = status
            order.save(update_fields=["status", "updated_at"])

        by = f" by {user.username}" if user is not None else ""
        logger.info(f"Order {order.order_number} status updated to {order.status}{by}")
        self.notifier.status_changed(order)
        return order

    # --- cancel -------------------------------------------------------------

    @staticmethod
    def cancellation_phase(order, now=None):
        """
        ``(phase, waste percentage, requires review)`` for cancelling ``order``
        now. Inside the grace window nothing is wasted.
        """
        if order.within_grace_window(now):
            return Order.CancellationPhase.GRACE_WINDOW, 0, False
        try:
            return CANCELLATION_RULES[order.effective_status(now)]
        except KeyError:
            raise InvalidCancellationState(
                f"Order cannot be cancelled while {order.status}"
            )

    def cancel_order(self, order_id, waitress, reason, details="") -> CancellationResult:
        with transaction.atomic():
            order = self._locked(order_id)
            if order.waitress_id != waitress.pk:
                raise NotOwner("Not authorized to cancel this order")
            if order.is_terminal:
                raise OrderLocked()

            phase, waste_percentage, requires_review = self.cancellation_phase(order)
            waste_cost = percentage_of(order.grand_total, waste_percentage)
            wasted_items = [
                {
                    "item_id": item.menu_item_id,
                    "item_name": item.name_en,
                    "quantity": item.quantity,
                    "cost": str(item.subtotal),
                }
                for item in order.items.all()
            ]

            order.status = Order.Status.CANCELLED
            order.cancelled_at = timezone.now()
            order.cancelled_by = waitress
            order.cancellation_reason = reason
            order.cancellation_phase = phase
            order.cancellation_details = details or ""
            order.waste_cost = waste_cost
            order.wasted_items = wasted_items
            order.save()

            log = CancellationLog.objects.create(
                order=order,
                order_number=order.order_number,
                cancelled_by=waitress,
                cancelled_by_name=waitress.full_name or waitress.username,
                phase=phase,
                reason=reason,
                details=details or "",
                items_lost=wasted_items,
                waste_cost=waste_cost,
                requires_review=requires_review,
            )

        logger.info(f"Order {order.order_number} cancelled by {waitress.username} ({phase})")
        self._record_analytics("record_cancelled_order", order)
        self.notifier.order_cancelled(order, log)
        return CancellationResult(order=order, log=log)

    def acknowledge_order(self, order_id, station, user):
        """A station tells the owning waitress it has seen the order."""
        try:
            order = Order.objects.get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError):
            raise OrderNotFound()
        self.notifier.order_acknowledged(order, station, user)
        return order


order_lifecycle_service = OrderLifecycleService()
