import logging

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.responses import success_response
from orders.serializers import (
    CancellationResultSerializer,
    OrderCancelSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)
from orders.services import order_lifecycle_service

logger = logging.getLogger(__name__)


class StatusActionsMixin:
    """
    Mixin for order status transition actions

    This mixin provides action methods for OrderViewSet.
    """

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        """Station update of one item (``item_id``) or the whole order."""
        data = self.validated(UpdateOrderStatusSerializer)
        order = order_lifecycle_service.update_order_status(
            pk, data["status"], item_id=data.get("item_id"), user=request.user
        )
        return success_response(OrderSerializer(order).data, message="Order status updated")

    @action(detail=True, methods=["patch"], url_path="cancel")
    def cancel(self, request: Request, pk=None) -> Response:
        data = self.validated(OrderCancelSerializer)
        result = order_lifecycle_service.cancel_order(
            pk, request.user, data["reason"], details=data["details"]
        )
        return success_response(CancellationResultSerializer(result).data, message="Order cancelled")
