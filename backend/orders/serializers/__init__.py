"""
Orders serializers package - modular serializer layer.
"""

# Order item serializers
from .order_item_serializers import (
    OrderItemAddOnSerializer,
    OrderItemSerializer,
    OrderLineInputSerializer,
)

# Order serializers
from .order_serializers import (
    CancellationLogSerializer,
    CancellationResultSerializer,
    OrderCancelSerializer,
    OrderCreateSerializer,
    OrderEditSerializer,
    OrderSerializer,
)

# Status serializers
from .status_serializers import UpdateOrderStatusSerializer

__all__ = [
    # Order items
    "OrderItemAddOnSerializer",
    "OrderItemSerializer",
    "OrderLineInputSerializer",
    # Orders
    "OrderSerializer",
    "OrderCreateSerializer",
    "OrderEditSerializer",
    "OrderCancelSerializer",
    "CancellationLogSerializer",
    "CancellationResultSerializer",
    # Status
    "UpdateOrderStatusSerializer",
]
