from rest_framework import serializers

from orders.models import OrderItem


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Station status update. With ``item_id`` only that item changes and the
    order status is derived; without it the whole order is set.
    """

    status = serializers.ChoiceField(choices=OrderItem.ItemStatus.choices)
    item_id = serializers.IntegerField(required=False)
