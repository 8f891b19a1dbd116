"""
Outbound side of the real-time feed.

Services never talk to the channel layer directly; they are handed a
``Broadcaster`` and publish named events to rooms through it. Publishing is
fire-and-forget: a failure is logged and never reaches the caller.
"""
import json
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone

from . import rooms

logger = logging.getLogger(__name__)

EVENT_MESSAGE_TYPE = "broadcast.event"


class Broadcaster:
    """Port used by the services to publish events to rooms."""

    def publish(self, room: str, event: str, payload: dict) -> None:
        raise NotImplementedError

    def to_room(self, room: str, event: str, payload: dict) -> None:
        try:
            data = self._prepare(payload)
            self.publish(room, event, data)
        except Exception as e:
            logger.error(f"Failed to publish '{event}' to room '{room}': {e}")

    def to_user(self, user_id, event: str, payload: dict) -> None:
        self.to_room(rooms.user_room(user_id), event, payload)

    def to_all(self, event: str, payload: dict) -> None:
        self.to_room(rooms.BROADCAST, event, payload)

    @staticmethod
    def _prepare(payload):
        # Decimals, UUIDs and datetimes become JSON-native values so every
        # channel layer backend can carry the message.
        data = json.loads(json.dumps(payload or {}, cls=DjangoJSONEncoder))
        data["timestamp"] = timezone.now().isoformat()
        return data


class ChannelLayerBroadcaster(Broadcaster):
    """Publishes through the configured Channels layer with ``group_send``."""

    def publish(self, room, event, payload):
        channel_layer = get_channel_layer()
        if channel_layer is None:
            logger.warning(f"No channel layer configured, dropping '{event}' for '{room}'")
            return

        async_to_sync(channel_layer.group_send)(
            room,
            {"type": EVENT_MESSAGE_TYPE, "event": event, "data": payload},
        )
        logger.debug(f"Published '{event}' to room '{room}'")


class RecordingBroadcaster(Broadcaster):
    """Keeps published events in memory. Used by tests and shell sessions."""

    def __init__(self):
        self.events = []

    def publish(self, room, event, payload):
        self.events.append((room, event, payload))

    def events_named(self, event):
        return [(room, payload) for room, name, payload in self.events if name == event]

    def rooms_for(self, event):
        return [room for room, name, _ in self.events if name == event]

    def clear(self):
        self.events.clear()


# Global instance handed to services that are not given one explicitly
broadcaster = ChannelLayerBroadcaster()
