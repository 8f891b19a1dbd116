from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import action

from core_backend.base import POSViewSet
from core_backend.responses import success_response

from .filters import MenuItemFilter
from .models import Addon, Category, MenuItem
from .serializers import (
    AddonSerializer,
    AvailabilitySerializer,
    CategorySerializer,
    MenuItemSerializer,
    MenuItemWriteSerializer,
    StockAdjustmentSerializer,
    StockDeductSerializer,
)
from .services import StockService, menu_service


class CategoryViewSet(POSViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    capability_map = {
        "list": "menu.read",
        "retrieve": "menu.read",
        "create": "menu.manage",
        "partial_update": "menu.manage",
        "destroy": "menu.manage",
    }
    search_fields = ["name_en", "name_am"]

    def list(self, request):
        categories = self.filter_queryset(self.get_queryset())
        return success_response(CategorySerializer(categories, many=True).data)

    def retrieve(self, request, pk=None):
        return success_response(CategorySerializer(self.get_object()).data)

    def create(self, request):
        data = self.validated(CategorySerializer)
        category = menu_service.create_category(data, request.user)
        return success_response(
            CategorySerializer(category).data,
            message="Category created successfully",
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):
        category = self.get_object()
        data = self.validated(CategorySerializer, instance=category, partial=True)
        category = menu_service.update_category(category, data, request.user)
        return success_response(CategorySerializer(category).data, message="Category updated successfully")

    def destroy(self, request, pk=None):
        menu_service.delete_category(self.get_object(), request.user)
        return success_response(message="Category deleted successfully")


class AddonViewSet(POSViewSet):
    queryset = Addon.objects.all()
    serializer_class = AddonSerializer
    capability_map = {
        "list": "menu.read",
        "retrieve": "menu.read",
        "create": "menu.manage",
        "partial_update": "menu.manage",
        "destroy": "menu.manage",
    }
    search_fields = ["name_en", "name_am"]

    def get_queryset(self):
        queryset = super().get_queryset()
        station = self.request.query_params.get("station")
        if station:
            # JSON containment lookups are not portable to SQLite
            ids = [addon.pk for addon in queryset if station in (addon.stations or [])]
            queryset = queryset.filter(pk__in=ids)
        return queryset

    def list(self, request):
        addons = self.filter_queryset(self.get_queryset())
        return success_response(AddonSerializer(addons, many=True).data)

    def retrieve(self, request, pk=None):
        return success_response(AddonSerializer(self.get_object()).data)

    def create(self, request):
        data = self.validated(AddonSerializer)
        data.setdefault("stations", ["kitchen", "juicebar"])
        addon = menu_service.create_addon(data, request.user)
        return success_response(
            AddonSerializer(addon).data,
            message="Add-on created successfully",
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):
        addon = self.get_object()
        data = self.validated(AddonSerializer, instance=addon, partial=True)
        addon = menu_service.update_addon(addon, data, request.user)
        return success_response(AddonSerializer(addon).data, message="Add-on updated successfully")

    def destroy(self, request, pk=None):
        menu_service.delete_addon(self.get_object(), request.user)
        return success_response(message="Add-on deleted successfully")


class MenuItemViewSet(POSViewSet):
    """
    Menu items. Everyone can read the active menu; the owner maintains
    items and stock; stations can switch items on and off.
    """

    queryset = MenuItem.objects.select_related("category").prefetch_related("add_ons")
    serializer_class = MenuItemSerializer
    filterset_class = MenuItemFilter
    search_fields = ["name_en", "name_am"]
    ordering_fields = ["name_en", "price_dine_in", "current_stock", "created_at"]
    capability_map = {
        "active": "menu.read",
        "list": "menu.manage",
        "retrieve": "menu.read",
        "create": "menu.manage",
        "partial_update": "menu.manage",
        "destroy": "menu.manage",
        "availability": "menu.toggle_availability",
        "stock": "stock.adjust",
        "deduct_stock": "stock.deduct",
    }

    @action(detail=False, methods=["get"], url_path="active")
    def active(self, request):
        items = self.filter_queryset(menu_service.active_items())
        return success_response(MenuItemSerializer(items, many=True).data)

    def list(self, request):
        items = self.filter_queryset(self.get_queryset())
        data = MenuItemSerializer(items, many=True).data
        return success_response(data, count=len(data))

    def retrieve(self, request, pk=None):
        return success_response(MenuItemSerializer(self.get_object()).data)

    def create(self, request):
        data = self.validated(MenuItemWriteSerializer)
        item = menu_service.create_item(data, request.user)
        return success_response(
            MenuItemSerializer(item).data,
            message="Menu item created successfully",
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):
        item = self.get_object()
        data = self.validated(MenuItemWriteSerializer, instance=item, partial=True)
        item = menu_service.update_item(item, data, request.user)
        return success_response(MenuItemSerializer(item).data, message="Menu item updated successfully")

    def destroy(self, request, pk=None):
        menu_service.delete_item(self.get_object(), request.user)
        return success_response(message="Menu item deleted successfully")

    @action(detail=True, methods=["patch"], url_path="availability")
    def availability(self, request, pk=None):
        item = get_object_or_404(MenuItem, pk=pk)
        data = self.validated(AvailabilitySerializer)
        item = menu_service.set_availability(item, data["available"], request.user)
        return success_response(
            MenuItemSerializer(item).data,
            message=f"Menu item {'enabled' if item.available else 'disabled'}",
        )

    @action(detail=True, methods=["patch"], url_path="stock")
    def stock(self, request, pk=None):
        data = self.validated(StockAdjustmentSerializer)
        change = StockService.adjust(pk, data["action"], data["quantity"], user=request.user)
        menu_service.announce_stock_change(change.item_id)
        return success_response(change.as_dict(), message="Stock updated successfully")

    @action(detail=False, methods=["post"], url_path="stock/deduct")
    def deduct_stock(self, request):
        data = self.validated(StockDeductSerializer)
        changes, alerts = StockService.deduct_many(data["items"])
        return success_response(
            [change.as_dict() for change in changes],
            message="Stock deducted successfully",
            low_stock_alerts=[alert.as_event() for alert in alerts],
        )
