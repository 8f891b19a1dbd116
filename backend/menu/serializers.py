from rest_framework import serializers

from .models import Addon, Category, MenuItem, PrepStation


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = [
            "id",
            "name_en",
            "name_am",
            "prep_station",
            "requires_preparation",
            "auto_deduct_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class AddonSerializer(serializers.ModelSerializer):
    stations = serializers.ListField(
        child=serializers.ChoiceField(choices=[PrepStation.KITCHEN, PrepStation.JUICEBAR]),
        allow_empty=False,
        required=False,
    )

    class Meta:
        model = Addon
        fields = [
            "id",
            "name_en",
            "name_am",
            "price",
            "stations",
            "is_optional",
            "available",
            "image_url",
            "stock_enabled",
            "current_stock",
            "min_stock",
            "stock_unit",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class AddonSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Addon
        fields = ["id", "name_en", "name_am", "price", "available"]


class MenuItemSerializer(serializers.ModelSerializer):
    """Read representation used by list/detail endpoints and menu events."""

    category = CategorySerializer(read_only=True)
    add_ons = AddonSummarySerializer(many=True, read_only=True)

    class Meta:
        model = MenuItem
        fields = [
            "id",
            "name_en",
            "name_am",
            "description_en",
            "description_am",
            "category",
            "price_dine_in",
            "price_takeaway",
            "prep_station",
            "requires_preparation",
            "prep_time_minutes",
            "stock_enabled",
            "current_stock",
            "min_stock",
            "stock_unit",
            "deduct_on_order",
            "add_ons",
            "available",
            "image_url",
            "image_public_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class MenuItemWriteSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())
    add_ons = serializers.PrimaryKeyRelatedField(
        queryset=Addon.objects.all(), many=True, required=False
    )

    class Meta:
        model = MenuItem
        fields = [
            "name_en",
            "name_am",
            "description_en",
            "description_am",
            "category",
            "price_dine_in",
            "price_takeaway",
            "prep_station",
            "requires_preparation",
            "prep_time_minutes",
            "stock_enabled",
            "current_stock",
            "min_stock",
            "stock_unit",
            "deduct_on_order",
            "add_ons",
            "available",
            "image_url",
            "image_public_id",
        ]
        extra_kwargs = {"price_takeaway": {"required": False}}


class AvailabilitySerializer(serializers.Serializer):
    available = serializers.BooleanField()


class StockAdjustmentSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["add", "remove", "set"])
    quantity = serializers.IntegerField(min_value=0)


class StockDeductLineSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)


class StockDeductSerializer(serializers.Serializer):
    items = StockDeductLineSerializer(many=True, allow_empty=False)
