"""
Orders services package.

- OrderLifecycleService: create, edit, station status and cancellation
- OrderCalculationService: line pricing, totals and the aggregate status
- OrderQueryService: per-role read views
- OrderNotificationService: order events for the real-time feed
"""

# Core order operations
from .order_service import (
    CancellationResult,
    OrderCreationResult,
    OrderLifecycleService,
    order_lifecycle_service,
)

# Calculation operations
from .calculation_service import OrderCalculationService, PricedLine

# Read side
from .query_service import OrderQueryService

# Notification operations
from .notification_service import OrderNotificationService

__all__ = [
    # Core
    "OrderLifecycleService",
    "order_lifecycle_service",
    "OrderCreationResult",
    "CancellationResult",
    # Calculations
    "OrderCalculationService",
    "PricedLine",
    # Queries
    "OrderQueryService",
    # Notifications
    "OrderNotificationService",
]
