import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Prefetch

from core_backend.exceptions import NotOwner, OrderNotFound, ValidationFailed
from users.models import User

from ..models import Order, OrderItem

logger = logging.getLogger(__name__)


class OrderQueryService:
    """Read side of the order lifecycle, one view per role."""

    @staticmethod
    def base_queryset():
        return Order.objects.select_related("waitress").prefetch_related("items__add_ons")

    @staticmethod
    def list_active_for_waitress(waitress):
        return (
            OrderQueryService.base_queryset()
            .filter(waitress=waitress, status__in=Order.ACTIVE_STATUSES)
            .order_by("-created_at")
        )

    @staticmethod
    def list_for_station(station):
        """
        Active orders that have items routed to ``station``, oldest first.
        ``order.items.all()`` only yields that station's items.
        """
        station_items = OrderItem.objects.filter(prep_station=station, skip_kitchen=False)
        return (
            Order.objects.filter(
                status__in=Order.ACTIVE_STATUSES,
                items__prep_station=station,
                items__skip_kitchen=False,
            )
            .distinct()
            .select_related("waitress")
            .prefetch_related(
                Prefetch("items", queryset=station_items.prefetch_related("add_ons"))
            )
            .order_by("created_at")
        )

    @staticmethod
    def list_active():
        return (
            OrderQueryService.base_queryset()
            .filter(status__in=Order.ACTIVE_STATUSES)
            .order_by("created_at")
        )

    @staticmethod
    def list_all(filters=None):
        """Owner view of every order, newest first, narrowed by ``OrderFilter``."""
        from ..filters import OrderFilter

        queryset = OrderQueryService.base_queryset().order_by("-created_at")
        if not filters:
            return queryset

        filterset = OrderFilter(filters, queryset=queryset)
        if not filterset.is_valid():
            raise ValidationFailed(
                errors=[
                    {"field": field, "message": message}
                    for field, messages in filterset.errors.items()
                    for message in messages
                ]
            )
        return filterset.qs

    @staticmethod
    def get_order(order_id) -> Order:
        try:
            return OrderQueryService.base_queryset().get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError):
            raise OrderNotFound()

    @staticmethod
    def get_order_for_user(order_id, user) -> Order:
        """Waitresses may only look at their own orders."""
        order = OrderQueryService.get_order(order_id)
        if user.role == User.Role.WAITRESS and order.waitress_id != user.pk:
            raise NotOwner("Not authorized to view this order")
        return order

    @staticmethod
    def active_orders_for(user):
        """The orders a freshly (re)connected client needs to redraw its screen."""
        if user.role == User.Role.WAITRESS:
            return OrderQueryService.list_active_for_waitress(user)
        if user.is_station:
            return OrderQueryService.list_for_station(user.role)
        return OrderQueryService.list_active()
