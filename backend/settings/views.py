from rest_framework import permissions, viewsets
from rest_framework.decorators import action

from core_backend.responses import success_response
from users.permissions import HasCapability

from .serializers import (
    AppearanceSerializer,
    ClearDisplaySerializer,
    OrderManagementSerializer,
    PinSerializer,
    ResetAnalyticsSerializer,
    RestaurantSettingsSerializer,
    TakeawayPricingSerializer,
)
from .services import SettingsService


class RestaurantSettingsViewSet(viewsets.ViewSet):
    """Read and update the restaurant settings singleton."""

    permission_classes = [permissions.IsAuthenticated, HasCapability]
    capability_map = {
        "list": "settings.read",
        "appearance": "settings.manage",
        "order_management": "settings.manage",
        "takeaway_pricing": "settings.manage",
        "clear_display": "settings.manage",
        "start_new_day": "settings.manage",
        "reset_analytics": "settings.manage",
    }

    @staticmethod
    def _validated(serializer_class, request):
        serializer = serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def list(self, request):
        settings_obj = SettingsService.get_settings()
        return success_response(RestaurantSettingsSerializer(settings_obj).data)

    @action(detail=False, methods=["patch"], url_path="appearance")
    def appearance(self, request):
        data = self._validated(AppearanceSerializer, request)
        settings_obj = SettingsService.update_appearance(request.user, **data)
        return success_response(
            RestaurantSettingsSerializer(settings_obj).data,
            message="Appearance settings updated",
        )

    @action(detail=False, methods=["patch"], url_path="order-management")
    def order_management(self, request):
        data = self._validated(OrderManagementSerializer, request)
        settings_obj = SettingsService.update_order_management(
            request.user, data["grace_window_minutes"]
        )
        return success_response(
            RestaurantSettingsSerializer(settings_obj).data,
            message="Order management settings updated",
        )

    @action(detail=False, methods=["patch"], url_path="takeaway-pricing")
    def takeaway_pricing(self, request):
        data = self._validated(TakeawayPricingSerializer, request)
        settings_obj, updated_count = SettingsService.update_takeaway_pricing(
            request.user,
            data["policy"],
            discount_percentage=data.get("discount_percentage"),
            apply_to_existing=data["apply_to_existing"],
        )
        return success_response(
            RestaurantSettingsSerializer(settings_obj).data,
            message="Takeaway pricing policy updated",
            updated_items=updated_count,
        )

    @action(detail=False, methods=["post"], url_path="clear-display")
    def clear_display(self, request):
        data = self._validated(ClearDisplaySerializer, request)
        count = SettingsService.clear_station_display(request.user, data["station"], data["pin"])
        return success_response(
            {"cancelled_orders": count},
            message=f"{data['station'].capitalize()} display cleared. {count} orders cancelled.",
        )

    @action(detail=False, methods=["post"], url_path="start-new-day")
    def start_new_day(self, request):
        data = self._validated(PinSerializer, request)
        SettingsService.start_new_day(request.user, data["pin"])
        return success_response(message="New day started successfully")

    @action(detail=False, methods=["post"], url_path="reset-analytics")
    def reset_analytics(self, request):
        data = self._validated(ResetAnalyticsSerializer, request)
        deleted = SettingsService.reset_analytics(request.user, data["pin"], data["confirmation"])
        return success_response(
            {"daily_analytics_deleted": deleted},
            message="All analytics data has been permanently deleted",
        )
