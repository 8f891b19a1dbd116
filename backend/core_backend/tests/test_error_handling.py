"""
Global Error Handling & Framework-Level Tests

This module tests the failure envelope every endpoint shares and the
framework-level responses (authentication, malformed bodies, unsupported
methods) that span all apps.

Priority: 4 (Critical for Production Readiness)

Test Categories:
1. Exception handler mapping (domain errors, DRF errors)
2. Global API error responses
3. Health check
"""
import pytest
from django.core.exceptions import ObjectDoesNotExist
from rest_framework import exceptions as drf_exceptions
from rest_framework import serializers

from core_backend.exceptions import (
    DependencyFailure,
    GraceWindowExpired,
    ItemsNotFound,
    NotOwner,
    OrderNotFound,
    ValidationFailed,
    api_exception_handler,
)


class NestedSerializer(serializers.Serializer):
    class LineSerializer(serializers.Serializer):
        quantity = serializers.IntegerField(min_value=1)

    customer = serializers.CharField()
    lines = LineSerializer(many=True)


class ListFieldSerializer(serializers.Serializer):
    class LineSerializer(serializers.Serializer):
        quantity = serializers.IntegerField(min_value=1)

    items = serializers.ListField(child=LineSerializer())


# ============================================================================
# EXCEPTION HANDLER
# ============================================================================

class TestExceptionHandler:
    """api_exception_handler builds {success, message, code, errors?}"""

    @pytest.mark.parametrize(
        "error, status_code, code",
        [
            (OrderNotFound(), 404, "order_not_found"),
            (NotOwner(), 403, "not_owner"),
            (GraceWindowExpired(), 409, "grace_window_expired"),
            (DependencyFailure(), 502, "dependency_failure"),
        ],
    )
    def test_domain_errors_map_to_status(self, error, status_code, code):
        response = api_exception_handler(error, {})

        assert response.status_code == status_code
        assert response.data == {"success": False, "message": error.message, "code": code}

    def test_missing_items_listed_as_errors(self):
        response = api_exception_handler(ItemsNotFound([7, 9]), {})

        assert response.status_code == 400
        assert response.data == {
            "success": False,
            "message": "Some menu items not found",
            "code": "items_not_found",
            "errors": [
                {"field": "items", "message": "Unknown item 7"},
                {"field": "items", "message": "Unknown item 9"},
            ],
        }

    def test_domain_error_carries_field_errors(self):
        error = ValidationFailed(errors=[{"field": "items", "message": "At least one item"}])

        response = api_exception_handler(error, {})

        assert response.status_code == 400
        assert response.data["errors"] == [{"field": "items", "message": "At least one item"}]

    def test_custom_message_kept(self):
        response = api_exception_handler(OrderNotFound("Order ORD-1 is gone"), {})

        assert response.data["message"] == "Order ORD-1 is gone"

    def test_nested_validation_errors_are_flattened(self):
        """
        HIGH: Verify nested serializer errors become field paths.

        Scenario:
        - Missing customer and a zero quantity on the second line
        - Expected: fields "customer" and "lines[1].quantity"
        """
        serializer = NestedSerializer(data={"lines": [{"quantity": 1}, {"quantity": 0}]})
        assert not serializer.is_valid()

        response = api_exception_handler(drf_exceptions.ValidationError(serializer.errors), {})

        assert response.status_code == 400
        assert response.data["code"] == "validation_failed"
        assert [error["field"] for error in response.data["errors"]] == ["customer", "lines[1].quantity"]

    def test_list_field_indexes_use_brackets(self):
        """ListField errors come keyed by integer index."""
        serializer = ListFieldSerializer(data={"items": [{"quantity": 2}, {"quantity": 0}]})
        assert not serializer.is_valid()

        response = api_exception_handler(drf_exceptions.ValidationError(serializer.errors), {})

        assert [error["field"] for error in response.data["errors"]] == ["items[1].quantity"]

    def test_plain_validation_error(self):
        response = api_exception_handler(drf_exceptions.ValidationError("Bad input"), {})

        assert response.data["errors"] == [{"field": "non_field_errors", "message": "Bad input"}]

    def test_drf_errors_are_reshaped(self):
        response = api_exception_handler(drf_exceptions.NotAuthenticated(), {})

        assert response.status_code == 401
        assert response.data["success"] is False
        assert response.data["code"] == "not_authenticated"

    def test_missing_object_is_404(self):
        response = api_exception_handler(ObjectDoesNotExist("gone"), {})

        assert response.status_code == 404
        assert response.data["success"] is False

    def test_unexpected_errors_fall_through(self):
        assert api_exception_handler(RuntimeError("boom"), {}) is None


# ============================================================================
# GLOBAL API ERROR RESPONSE TESTS
# ============================================================================

@pytest.mark.django_db
class TestGlobalAPIErrorResponses:
    """Framework-level API error responses that apply across all apps."""

    @pytest.mark.parametrize(
        "method, url",
        [
            ("get", "/api/orders/my-active/"),
            ("post", "/api/payments/"),
            ("get", "/api/menu/items/active/"),
            ("get", "/api/analytics/today/"),
            ("get", "/api/staff/"),
        ],
    )
    def test_protected_endpoints_require_authentication(self, api_client, method, url):
        """
        CRITICAL: Verify unauthenticated requests are refused everywhere.

        Scenario:
        - No token and no cookie
        - Expected: 401 with the failure envelope
        """
        response = getattr(api_client, method)(url)

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_malformed_json_returns_400(self, waitress_client):
        response = waitress_client.post(
            "/api/orders/", data="{not json", content_type="application/json"
        )

        assert response.status_code == 400
        assert response.json()["code"] == "parse_error"

    def test_unsupported_method_returns_405(self, owner_client):
        response = owner_client.delete("/api/auth/me/")

        assert response.status_code == 405
        assert response.json()["success"] is False


class TestHealthCheck:
    def test_health_is_public(self, client):
        response = client.get("/api/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
