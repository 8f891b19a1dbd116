"""
Room (channel-layer group) names used by the real-time feed.

Every connected socket joins ``broadcast``, the room of its role and its
personal ``user-<id>`` room.
"""

KITCHEN = "kitchen"
JUICEBAR = "juicebar"
WAITRESS = "waitress"
OWNER = "owner"
BROADCAST = "broadcast"

ROLE_ROOMS = (KITCHEN, JUICEBAR, WAITRESS, OWNER)
STATION_ROOMS = (KITCHEN, JUICEBAR)


def role_room(role):
    if role not in ROLE_ROOMS:
        raise ValueError(f"Unknown role room: {role}")
    return role


def user_room(user_id):
    return f"user-{user_id}"
