from rest_framework import serializers

from orders.models import OrderItem, OrderItemAddOn


class OrderItemAddOnSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItemAddOn
        fields = ["addon_id", "name_en", "name_am", "price"]


class OrderItemSerializer(serializers.ModelSerializer):
    add_ons = OrderItemAddOnSerializer(many=True, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_item",
            "name_en",
            "name_am",
            "variant",
            "quantity",
            "price_per_unit",
            "add_ons",
            "special_notes",
            "subtotal",
            "prep_station",
            "auto_complete",
            "skip_kitchen",
            "status",
        ]
        read_only_fields = fields


class OrderLineInputSerializer(serializers.Serializer):
    """One requested line. Prices come from the menu, never the client."""

    item_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    variant = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    special_notes = serializers.CharField(required=False, allow_blank=True, default="")
    add_ons = serializers.ListField(
        child=serializers.IntegerField(), required=False, default=list
    )
