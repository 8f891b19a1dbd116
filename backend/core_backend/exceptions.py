"""
Domain exceptions and the REST framework exception handler.

Services raise the classes below; ``api_exception_handler`` turns them (and
DRF's own exceptions) into the uniform failure envelope::

    {"success": false, "message": "...", "code": "...", "errors": [...]}
"""
import logging

from django.core.exceptions import ObjectDoesNotExist
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class POSError(Exception):
    """Base class for every failure raised by the POS services."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"
    default_message = "Request failed"

    def __init__(self, message=None, errors=None, **details):
        self.message = message or self.default_message
        self.errors = errors or []
        self.details = details
        super().__init__(self.message)


# --- NotFound ---------------------------------------------------------------


class NotFound(POSError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class OrderNotFound(NotFound):
    code = "order_not_found"
    default_message = "Order not found"


class ItemNotFound(NotFound):
    code = "item_not_found"
    default_message = "Item not found in order"


class MenuItemNotFound(NotFound):
    code = "menu_item_not_found"
    default_message = "Menu item not found"


# --- Forbidden --------------------------------------------------------------


class Forbidden(POSError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "You do not have permission to perform this action"


class NotOwner(Forbidden):
    code = "not_owner"
    default_message = "You can only modify your own orders"


# --- ValidationFailed -------------------------------------------------------


class ValidationFailed(POSError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_failed"
    default_message = "Validation failed"


class ItemsNotFound(ValidationFailed):
    code = "items_not_found"
    default_message = "Some menu items not found"

    def __init__(self, missing_ids, message=None):
        self.missing_ids = [str(item_id) for item_id in missing_ids]
        super().__init__(
            message,
            errors=[{"field": "items", "message": f"Unknown item {item_id}"} for item_id in self.missing_ids],
        )


class ItemsUnavailable(ValidationFailed):
    code = "items_unavailable"

    def __init__(self, names):
        self.names = list(names)
        super().__init__(f"Items not available: {', '.join(self.names)}")


class InvalidPin(ValidationFailed):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "invalid_pin"
    default_message = "Invalid PIN"


# --- StateConflict ----------------------------------------------------------


class StateConflict(POSError):
    status_code = status.HTTP_409_CONFLICT
    code = "state_conflict"
    default_message = "Operation not allowed in the current state"


class GraceWindowExpired(StateConflict):
    code = "grace_window_expired"
    default_message = "Grace window has expired. Order cannot be edited."


class OrderLocked(StateConflict):
    code = "order_locked"
    default_message = "Order is already completed or cancelled"


class OrderNotReady(StateConflict):
    code = "order_not_ready"
    default_message = "Order must be ready before payment"


class AlreadyPaid(StateConflict):
    code = "already_paid"
    default_message = "Order has already been paid"


class SplitMismatch(StateConflict):
    code = "split_mismatch"
    default_message = "Split payments total does not match order total"


class InsufficientPayment(StateConflict):
    code = "insufficient_payment"
    default_message = "Insufficient payment amount"


class InvalidCancellationState(StateConflict):
    code = "invalid_cancellation_state"
    default_message = "Order cannot be cancelled in its current state"


class ReferencedResource(StateConflict):
    code = "referenced_resource"
    default_message = "Resource is still in use"


class StockTrackingDisabled(StateConflict):
    code = "stock_tracking_disabled"
    default_message = "Stock tracking is not enabled for this item"


# --- DependencyFailure ------------------------------------------------------


class DependencyFailure(POSError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "dependency_failure"
    default_message = "An external service failed"


def _flatten_validation_errors(detail, prefix=""):
    """Turn DRF's nested ``ValidationError.detail`` into ``[{field, message}]``."""
    errors = []
    if isinstance(detail, dict):
        for key, value in detail.items():
            if isinstance(key, int):
                field = f"{prefix}[{key}]"
            else:
                field = f"{prefix}.{key}" if prefix else str(key)
            errors.extend(_flatten_validation_errors(value, field))
    elif isinstance(detail, list):
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                errors.extend(_flatten_validation_errors(value, f"{prefix}[{index}]"))
            else:
                errors.append({"field": prefix or "non_field_errors", "message": str(value)})
    else:
        errors.append({"field": prefix or "non_field_errors", "message": str(detail)})
    return errors


def api_exception_handler(exc, context):
    """
    REST framework exception handler producing the failure envelope.

    Domain errors are mapped through their ``status_code``/``code``; DRF
    exceptions keep their status but are reshaped; anything else falls
    through to Django (500).
    """
    if isinstance(exc, POSError):
        body = {"success": False, "message": exc.message, "code": exc.code}
        if exc.errors:
            body["errors"] = exc.errors
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}")
        return Response(body, status=exc.status_code)

    if isinstance(exc, ObjectDoesNotExist):
        exc = Http404(str(exc))

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        response.data = {
            "success": False,
            "message": "Validation failed",
            "code": "validation_failed",
            "errors": _flatten_validation_errors(exc.detail),
        }
    else:
        detail = getattr(exc, "detail", None)
        message = str(detail) if detail is not None else str(exc)
        code = exc.get_codes() if isinstance(exc, APIException) else "not_found"
        response.data = {
            "success": False,
            "message": message,
            "code": code if isinstance(code, str) else "error",
        }
    return response
