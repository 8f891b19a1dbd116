import logging

from rest_framework import status
from rest_framework.decorators import action

from core_backend.base import POSViewSet
from core_backend.responses import success_response
from orders.serializers import OrderSerializer

from .serializers import (
    ChangeSerializer,
    DailyPaymentsQuerySerializer,
    DailySummarySerializer,
    PaymentSerializer,
    ProcessPaymentSerializer,
)
from .services import payment_service

logger = logging.getLogger(__name__)


class PaymentViewSet(POSViewSet):
    """Payment settlement for waitresses and the owner's daily cash-up."""

    serializer_class = PaymentSerializer
    filter_backends = []
    capability_map = {
        "create": "payment.process",
        "daily": "payment.daily_summary",
    }

    def create(self, request):
        data = self.validated(ProcessPaymentSerializer)
        result = payment_service.process_payment(
            data["order_id"],
            request.user,
            data["payment_method"],
            amount_received=data.get("amount_received"),
            split_payments=data.get("split_payments"),
            transaction_id=data["transaction_id"],
        )
        change = ChangeSerializer(result.change).data if result.change is not None else None
        return success_response(
            {
                "payment": PaymentSerializer(result.payment).data,
                "order": OrderSerializer(result.order).data,
                "change": change,
            },
            message="Payment processed successfully",
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"], url_path="daily")
    def daily(self, request):
        query = self.validated(DailyPaymentsQuerySerializer, data=request.query_params)
        result = payment_service.daily_summary(query.get("date"))
        return success_response(
            {
                "payments": PaymentSerializer(result["payments"], many=True).data,
                "summary": DailySummarySerializer(result["summary"]).data,
            },
            date=result["date"].isoformat(),
        )
