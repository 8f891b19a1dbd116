from rest_framework import serializers

from orders.models import Order
from orders.serializers import CancellationLogSerializer

from .models import HourlySales, ItemSales, WaitressSales


class WaitressSalesSerializer(serializers.ModelSerializer):
    class Meta:
        model = WaitressSales
        fields = ["waitress", "waitress_name", "orders", "revenue", "cancellations"]


class HourlySalesSerializer(serializers.ModelSerializer):
    class Meta:
        model = HourlySales
        fields = ["hour", "orders", "revenue"]


class ItemSalesSerializer(serializers.ModelSerializer):
    class Meta:
        model = ItemSales
        fields = ["menu_item", "item_name_en", "item_name_am", "quantity_sold", "revenue"]


class PaymentMethodTotalsSerializer(serializers.Serializer):
    cash = serializers.DecimalField(max_digits=12, decimal_places=2)
    card = serializers.DecimalField(max_digits=12, decimal_places=2)
    mobile_money = serializers.DecimalField(max_digits=12, decimal_places=2)


class TodaySummarySerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    completed_orders = serializers.IntegerField()
    cancelled_orders = serializers.IntegerField()
    active_orders = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    average_order_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    customer_count = serializers.IntegerField()


class DailyRollupSerializer(serializers.Serializer):
    total_waste_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    sales_by_waitress = WaitressSalesSerializer(many=True)
    sales_by_hour = HourlySalesSerializer(many=True)
    payment_methods = PaymentMethodTotalsSerializer()
    top_items = ItemSalesSerializer(many=True)


class TodayAnalyticsSerializer(serializers.Serializer):
    date = serializers.DateField()
    summary = TodaySummarySerializer()
    analytics = DailyRollupSerializer()


class CancellationSummarySerializer(serializers.Serializer):
    total = serializers.IntegerField()
    requires_review = serializers.IntegerField()
    total_waste_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    by_phase = serializers.DictField(child=serializers.IntegerField())


class CancellationQuerySerializer(serializers.Serializer):
    requires_review = serializers.BooleanField(required=False, allow_null=True, default=None)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    phase = serializers.ChoiceField(choices=Order.CancellationPhase.choices, required=False)

    def validate(self, data):
        start, end = data.get("start_date"), data.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError({"end_date": "End date must not be before start date."})
        return data


__all__ = [
    "CancellationLogSerializer",
    "CancellationQuerySerializer",
    "CancellationSummarySerializer",
    "TodayAnalyticsSerializer",
]
