from rest_framework import serializers

from .models import PIN_PATTERN, User


def validate_pin(value):
    if not PIN_PATTERN.match(value or ""):
        raise serializers.ValidationError("PIN must be exactly 4 digits")
    return value


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "full_name",
            "role",
            "is_active",
            "last_login",
            "date_joined",
        ]
        read_only_fields = fields


class POSLoginSerializer(serializers.Serializer):
    username = serializers.CharField(required=True)
    pin = serializers.CharField(
        required=True, write_only=True, style={"input_type": "password"}
    )


class StaffCreateSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=50)
    pin = serializers.CharField(write_only=True, validators=[validate_pin])
    full_name = serializers.CharField(max_length=150)
    role = serializers.ChoiceField(choices=User.Role.choices)


class StaffUpdateSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=50, required=False)
    full_name = serializers.CharField(max_length=150, required=False)
    role = serializers.ChoiceField(choices=User.Role.choices, required=False)
    is_active = serializers.BooleanField(required=False)


class ResetPinSerializer(serializers.Serializer):
    pin = serializers.CharField(write_only=True, validators=[validate_pin])


class PerformanceSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    completed_orders = serializers.IntegerField()
    cancelled_orders = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=12, decimal_places=2)


class StaffSerializer(UserSerializer):
    created_by = serializers.CharField(source="created_by.full_name", default=None, read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ["created_by"]
        read_only_fields = fields
