from rest_framework import serializers

from orders.models import CancellationLog, Order

from .order_item_serializers import OrderItemSerializer, OrderLineInputSerializer


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    within_grace_window = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "order_type",
            "customer_name",
            "customer_phone",
            "waitress",
            "waitress_name",
            "items",
            "subtotal",
            "grand_total",
            "status",
            "payment_status",
            "grace_window_ends_at",
            "within_grace_window",
            "completed_at",
            "cancelled_at",
            "cancelled_by",
            "cancellation_reason",
            "cancellation_phase",
            "cancellation_details",
            "waste_cost",
            "wasted_items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_within_grace_window(self, obj):
        return obj.within_grace_window()


class OrderCreateSerializer(serializers.Serializer):
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices)
    customer_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default="")
    items = OrderLineInputSerializer(many=True, allow_empty=False)


class OrderEditSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    customer_phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    items = OrderLineInputSerializer(many=True, allow_empty=False, required=False)


class OrderCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)
    details = serializers.CharField(required=False, allow_blank=True, default="")


class CancellationResultSerializer(serializers.Serializer):
    """Renders ``OrderLifecycleService.cancel_order`` results."""

    order = OrderSerializer()
    requires_review = serializers.BooleanField()
    waste_cost = serializers.DecimalField(max_digits=10, decimal_places=2)


class CancellationLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = CancellationLog
        fields = [
            "id",
            "order",
            "order_number",
            "cancelled_by",
            "cancelled_by_name",
            "phase",
            "reason",
            "details",
            "items_lost",
            "waste_cost",
            "requires_review",
            "reviewed_by",
            "reviewed_at",
            "created_at",
        ]
        read_only_fields = fields
