from rest_framework import serializers

from .models import Payment, PaymentMethod, SplitPayment

SPLIT_LINE_METHODS = [PaymentMethod.CASH, PaymentMethod.CARD, PaymentMethod.MOBILE_MONEY]


class SplitPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = SplitPayment
        fields = ["method", "amount"]


class PaymentSerializer(serializers.ModelSerializer):
    split_payments = SplitPaymentSerializer(many=True, read_only=True)
    waitress_name = serializers.CharField(source="waitress.full_name", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "order",
            "order_number",
            "payment_method",
            "total_amount",
            "amount_received",
            "change_due",
            "split_payments",
            "transaction_id",
            "waitress",
            "waitress_name",
            "created_at",
        ]
        read_only_fields = fields


class SplitLineInputSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=SPLIT_LINE_METHODS)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class ProcessPaymentSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    amount_received = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    split_payments = SplitLineInputSerializer(many=True, required=False)
    transaction_id = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class ChangeLineSerializer(serializers.Serializer):
    denomination = serializers.DecimalField(max_digits=10, decimal_places=2)
    count = serializers.IntegerField()


class ChangeSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    breakdown = ChangeLineSerializer(many=True)


class DailySummarySerializer(serializers.Serializer):
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    count = serializers.IntegerField()
    cash = serializers.DecimalField(max_digits=12, decimal_places=2)
    card = serializers.DecimalField(max_digits=12, decimal_places=2)
    mobile_money = serializers.DecimalField(max_digits=12, decimal_places=2)


class DailyPaymentsQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
