"""
Role based access for the POS API.

Every protected operation is listed once in ``CAPABILITIES`` with the roles
allowed to perform it. Views declare ``capability_map`` (action -> operation)
and use ``HasCapability``; the check runs before any service call.
"""
import logging

from rest_framework import permissions

from .models import User

logger = logging.getLogger(__name__)

OWNER = User.Role.OWNER
WAITRESS = User.Role.WAITRESS
KITCHEN = User.Role.KITCHEN
JUICEBAR = User.Role.JUICEBAR
ALL_ROLES = frozenset(User.Role.values)
STATIONS = frozenset({KITCHEN, JUICEBAR})

CAPABILITIES = {
    # Orders
    "order.create": {WAITRESS},
    "order.list_own_active": {WAITRESS},
    "order.list_station": STATIONS,
    "order.list_all": {OWNER},
    "order.view": {WAITRESS, OWNER},
    "order.edit": {WAITRESS},
    "order.update_status": STATIONS,
    "order.cancel": {WAITRESS},
    # Payments
    "payment.process": {WAITRESS},
    "payment.daily_summary": {OWNER},
    # Menu
    "menu.read": ALL_ROLES,
    "menu.manage": {OWNER},
    "menu.toggle_availability": {OWNER} | STATIONS,
    "stock.adjust": {OWNER},
    "stock.deduct": ALL_ROLES,
    # Staff
    "staff.manage": {OWNER},
    # Settings
    "settings.read": ALL_ROLES,
    "settings.manage": {OWNER},
    # Analytics
    "analytics.read": {OWNER},
    "analytics.review": {OWNER},
}


def roles_for(operation):
    try:
        return CAPABILITIES[operation]
    except KeyError:
        raise KeyError(f"Unknown capability '{operation}'")


def user_can(user, operation):
    if not user or not user.is_authenticated or not user.is_active:
        return False
    return user.role in roles_for(operation)


class HasCapability(permissions.BasePermission):
    """
    Looks up the operation for the current view action in the view's
    ``capability_map`` (falling back to ``capability``) and checks the
    caller's role against ``CAPABILITIES``.
    """

    message = "Your role is not allowed to perform this action"

    def has_permission(self, request, view):
        capability_map = getattr(view, "capability_map", {})
        action = getattr(view, "action", None)
        operation = capability_map.get(action) or getattr(view, "capability", None)
        if operation is None:
            logger.warning(f"No capability declared for {view.__class__.__name__}.{action}")
            return False
        allowed = user_can(request.user, operation)
        if not allowed and request.user and request.user.is_authenticated:
            logger.info(
                f"User {request.user.username} ({request.user.role}) denied '{operation}'"
            )
        return allowed
