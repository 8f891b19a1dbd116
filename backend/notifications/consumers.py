import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone

from core_backend.exceptions import POSError

from . import rooms

logger = logging.getLogger(__name__)

CLOSE_UNAUTHENTICATED = 4001


class RealtimeConsumer(AsyncWebsocketConsumer):
    """
    The single socket every client (waitress tablet, station screen, owner
    dashboard) keeps open.

    Clients send ``{"action": ..., "data": {...}}`` and receive
    ``{"event": ..., "data": {...}}``. Rooms are always derived from the
    authenticated user, never from what the client asks for.
    """

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated or not user.is_active:
            logger.warning("RealtimeConsumer: unauthenticated connection rejected")
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return

        self.user = user
        self.groups_joined = set()
        await self._join(rooms.BROADCAST)
        await self.accept()
        logger.info(f"Socket connected for {user.username} ({user.role})")

    async def disconnect(self, close_code):
        for room in list(getattr(self, "groups_joined", ())):
            await self.channel_layer.group_discard(room, self.channel_name)
        if hasattr(self, "user"):
            logger.info(f"Socket disconnected for {self.user.username} (code {close_code})")

    async def receive(self, text_data=None, bytes_data=None):
        try:
            message = json.loads(text_data or "")
        except json.JSONDecodeError:
            await self.send_event("error", {"message": "Invalid JSON"})
            return
        if not isinstance(message, dict):
            await self.send_event("error", {"message": "Invalid message"})
            return

        action = message.get("action")
        data = message.get("data") or {}
        handler = self.ACTIONS.get(action)
        if handler is None:
            logger.warning(f"Unknown socket action from {self.user.username}: {action}")
            await self.send_event("error", {"message": f"Unknown action: {action}"})
            return

        try:
            await handler(self, data)
        except POSError as e:
            await self.send_event("error", {"message": e.message, "code": e.code})
        except Exception as e:
            logger.error(f"Error handling '{action}' from {self.user.username}: {e}", exc_info=True)
            await self.send_event("error", {"message": "Internal error"})

    # --- client actions -----------------------------------------------------

    async def join_room(self, data):
        joined = [rooms.role_room(self.user.role), rooms.user_room(self.user.pk)]
        for room in joined:
            await self._join(room)
        await self.send_event("joined-room", {"rooms": joined, "role": self.user.role})

    async def leave_room(self, data):
        left = [rooms.role_room(self.user.role), rooms.user_room(self.user.pk)]
        for room in left:
            await self._leave(room)
        await self.send_event("left-room", {"rooms": left})

    async def request_sync(self, data):
        orders = await self._active_orders()
        await self.send_event("sync-data", {"orders": orders})

    async def ping(self, data):
        await self.send_event("pong", {})

    async def order_acknowledged(self, data):
        if not self.user.is_station:
            await self.send_event("error", {"message": "Only stations acknowledge orders"})
            return
        await self._acknowledge(data.get("order_id"))

    ACTIONS = {
        "join-room": join_room,
        "leave-room": leave_room,
        "request-sync": request_sync,
        "ping": ping,
        "order-acknowledged": order_acknowledged,
    }

    # --- channel layer events -----------------------------------------------

    async def broadcast_event(self, message):
        """Handler for ``broadcast.event`` messages published by the Broadcaster."""
        await self.send_event(message["event"], message.get("data") or {})

    # --- helpers ------------------------------------------------------------

    async def send_event(self, event, data):
        if "timestamp" not in data:
            data = {**data, "timestamp": timezone.now().isoformat()}
        await self.send(text_data=json.dumps({"event": event, "data": data}, cls=DjangoJSONEncoder))

    async def _join(self, room):
        await self.channel_layer.group_add(room, self.channel_name)
        self.groups_joined.add(room)

    async def _leave(self, room):
        if room == rooms.BROADCAST or room not in self.groups_joined:
            return
        await self.channel_layer.group_discard(room, self.channel_name)
        self.groups_joined.discard(room)

    @database_sync_to_async
    def _active_orders(self):
        from orders.serializers import OrderSerializer
        from orders.services import OrderQueryService

        orders = OrderQueryService.active_orders_for(self.user)
        return OrderSerializer(orders, many=True).data

    @database_sync_to_async
    def _acknowledge(self, order_id):
        from orders.services import order_lifecycle_service

        order_lifecycle_service.acknowledge_order(order_id, self.user.role, self.user)
