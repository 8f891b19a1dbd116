import logging

from notifications import rooms
from notifications.services import broadcaster as default_broadcaster

from menu.models import PrepStation

logger = logging.getLogger(__name__)


class OrderNotificationService:
    """
    Builds the order events and routes them to the interested rooms.
    Stations only see the items they prepare; waitresses hear about their
    own orders; the owner gets summaries.
    """

    def __init__(self, broadcaster=None):
        self.broadcaster = broadcaster or default_broadcaster

    @staticmethod
    def serialize(order, items=None):
        from ..serializers import OrderSerializer

        data = OrderSerializer(order).data
        if items is not None:
            from ..serializers import OrderItemSerializer

            data["items"] = OrderItemSerializer(items, many=True).data
        return data

    @staticmethod
    def station_items(items, station):
        return [item for item in items if item.prep_station == station and not item.skip_kitchen]

    def order_created(self, order, stock_deductions=(), low_stock_alerts=()):
        items = list(order.items.all())
        for station in (PrepStation.KITCHEN, PrepStation.JUICEBAR):
            routed = self.station_items(items, station)
            if not routed:
                continue
            self.broadcaster.to_room(
                rooms.role_room(station), "new-order", {"order": self.serialize(order, routed)}
            )
            logger.info(f"Sent {len(routed)} items of {order.order_number} to {station}")

        self.broadcaster.to_room(
            rooms.OWNER,
            "new-order-alert",
            {
                "orderId": order.pk,
                "orderNumber": order.order_number,
                "waitressName": order.waitress_name,
                "total": order.grand_total,
                "itemCount": len(items),
            },
        )
        for alert in low_stock_alerts:
            self.broadcaster.to_room(rooms.OWNER, "low-stock-alert", alert.as_event())

        self.broadcaster.to_user(
            order.waitress_id,
            "order-created-success",
            {"orderId": order.pk, "orderNumber": order.order_number},
        )

    def order_updated(self, order):
        payload = {"order": self.serialize(order)}
        for room in rooms.STATION_ROOMS:
            self.broadcaster.to_room(room, "order-updated", payload)

    def status_changed(self, order):
        from ..serializers import OrderItemSerializer

        self.broadcaster.to_user(
            order.waitress_id,
            "order-status-update",
            {
                "orderId": order.pk,
                "orderNumber": order.order_number,
                "status": order.status,
                "items": OrderItemSerializer(order.items.all(), many=True).data,
            },
        )

    def order_cancelled(self, order, cancellation_log):
        for room in rooms.STATION_ROOMS:
            self.broadcaster.to_room(
                room, "order-cancelled", {"orderId": order.pk, "orderNumber": order.order_number}
            )

        if cancellation_log.requires_review:
            self.broadcaster.to_room(
                rooms.OWNER,
                "cancellation-requires-review",
                {
                    "cancellationId": cancellation_log.pk,
                    "orderNumber": order.order_number,
                    "waitressName": cancellation_log.cancelled_by_name,
                    "phase": cancellation_log.phase,
                    "wasteCost": cancellation_log.waste_cost,
                    "reason": cancellation_log.reason,
                },
            )

    def order_completed(self, order, payment):
        self.broadcaster.to_room(
            rooms.OWNER,
            "order-completed",
            {
                "orderId": order.pk,
                "orderNumber": order.order_number,
                "waitressName": order.waitress_name,
                "total": order.grand_total,
                "paymentMethod": payment.payment_method,
            },
        )

    def order_acknowledged(self, order, station, acknowledged_by):
        self.broadcaster.to_user(
            order.waitress_id,
            "order-acknowledgement",
            {
                "orderId": order.pk,
                "orderNumber": order.order_number,
                "station": station,
                "acknowledgedBy": acknowledged_by.full_name or acknowledged_by.username,
            },
        )
