from rest_framework import serializers

from .models import Language, RestaurantSettings, TakeawayPolicy, Theme


class RestaurantSettingsSerializer(serializers.ModelSerializer):
    updated_by = serializers.CharField(source="updated_by.full_name", default=None, read_only=True)

    class Meta:
        model = RestaurantSettings
        fields = [
            "language",
            "theme",
            "grace_window_minutes",
            "takeaway_policy",
            "takeaway_discount_percentage",
            "updated_by",
            "updated_at",
        ]
        read_only_fields = fields


class AppearanceSerializer(serializers.Serializer):
    language = serializers.ChoiceField(choices=Language.choices, required=False)
    theme = serializers.ChoiceField(choices=Theme.choices, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide a language or a theme")
        return attrs


class OrderManagementSerializer(serializers.Serializer):
    grace_window_minutes = serializers.IntegerField(min_value=1, max_value=5)


class TakeawayPricingSerializer(serializers.Serializer):
    policy = serializers.ChoiceField(choices=TakeawayPolicy.choices)
    discount_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
    apply_to_existing = serializers.BooleanField(default=False)

    def validate(self, attrs):
        if (
            attrs["policy"] == TakeawayPolicy.PERCENTAGE_DISCOUNT
            and attrs.get("discount_percentage") is None
        ):
            raise serializers.ValidationError(
                {"discount_percentage": "Required for the percentage-discount policy"}
            )
        return attrs


class PinSerializer(serializers.Serializer):
    pin = serializers.CharField(write_only=True)


class ClearDisplaySerializer(PinSerializer):
    station = serializers.ChoiceField(choices=["kitchen", "juicebar"])


class ResetAnalyticsSerializer(PinSerializer):
    confirmation = serializers.CharField()
