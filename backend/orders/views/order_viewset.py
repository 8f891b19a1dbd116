import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.base import POSViewSet
from core_backend.responses import success_response
from orders.serializers import OrderCreateSerializer, OrderEditSerializer, OrderSerializer
from orders.services import OrderQueryService, order_lifecycle_service

from .list_actions import ListActionsMixin
from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(ListActionsMixin, StatusActionsMixin, POSViewSet):
    """
    Orders API.

    This viewset combines:
    - Per-role listings (ListActionsMixin)
    - Station status updates and cancellation (StatusActionsMixin)
    """

    serializer_class = OrderSerializer
    # Filtering for the owner list happens in OrderQueryService.list_all
    filter_backends = []
    capability_map = {
        "create": "order.create",
        "retrieve": "order.view",
        "partial_update": "order.edit",
        "my_active": "order.list_own_active",
        "station": "order.list_station",
        "all_orders": "order.list_all",
        "update_status": "order.update_status",
        "cancel": "order.cancel",
    }

    def get_queryset(self):
        return OrderQueryService.base_queryset()

    def create(self, request: Request) -> Response:
        data = self.validated(OrderCreateSerializer)
        result = order_lifecycle_service.create_order(
            waitress=request.user,
            order_type=data["order_type"],
            items=data["items"],
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
        )
        return success_response(
            OrderSerializer(result.order).data,
            message="Order created successfully",
            status=status.HTTP_201_CREATED,
            stock_deductions=[change.as_dict() for change in result.stock_deductions],
            low_stock_alerts=[alert.as_event() for alert in result.low_stock_alerts],
        )

    def retrieve(self, request: Request, pk=None) -> Response:
        order = OrderQueryService.get_order_for_user(pk, request.user)
        return success_response(OrderSerializer(order).data)

    def partial_update(self, request: Request, pk=None) -> Response:
        data = self.validated(OrderEditSerializer)
        order = order_lifecycle_service.edit_order(
            pk,
            request.user,
            items=data.get("items"),
            customer_name=data.get("customer_name"),
            customer_phone=data.get("customer_phone"),
        )
        return success_response(OrderSerializer(order).data, message="Order updated successfully")
