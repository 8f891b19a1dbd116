from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.responses import success_response
from orders.serializers import OrderSerializer
from orders.services import OrderQueryService


class ListActionsMixin:
    """Per-role order lists for OrderViewSet."""

    @staticmethod
    def _listing(orders) -> Response:
        data = OrderSerializer(orders, many=True).data
        return success_response(data, count=len(data))

    @action(detail=False, methods=["get"], url_path="my-active")
    def my_active(self, request: Request) -> Response:
        return self._listing(OrderQueryService.list_active_for_waitress(request.user))

    @action(detail=False, methods=["get"], url_path="station")
    def station(self, request: Request) -> Response:
        """Kitchen and juice bar displays: only the caller's station items."""
        return self._listing(OrderQueryService.list_for_station(request.user.role))

    @action(detail=False, methods=["get"], url_path="all")
    def all_orders(self, request: Request) -> Response:
        return self._listing(OrderQueryService.list_all(request.query_params))
