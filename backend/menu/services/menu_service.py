import logging
from decimal import Decimal

from django.db import transaction

from core_backend.exceptions import DependencyFailure, MenuItemNotFound, NotFound, ReferencedResource
from notifications.services import broadcaster as default_broadcaster
from payments.money import percentage_of, quantize

from ..image_service import image_service as default_image_service
from ..models import Addon, Category, MenuItem

logger = logging.getLogger(__name__)


class MenuService:
    """
    Owner-facing menu maintenance plus the lookups the order engine needs.
    Every change is announced to all connected clients.
    """

    def __init__(self, broadcaster=None, image_service=None):
        self.broadcaster = broadcaster or default_broadcaster
        self.image_service = image_service or default_image_service

    # --- lookups ------------------------------------------------------------

    @staticmethod
    def get_items_by_ids(item_ids):
        """Returns ``{id: MenuItem}`` for the ids that exist."""
        return MenuItem.objects.select_related("category").in_bulk(set(item_ids))

    @staticmethod
    def get_item(item_id) -> MenuItem:
        try:
            return MenuItem.objects.select_related("category").get(pk=item_id)
        except MenuItem.DoesNotExist:
            raise MenuItemNotFound()

    @staticmethod
    def active_items():
        return (
            MenuItem.objects.filter(available=True)
            .select_related("category")
            .prefetch_related("add_ons")
        )

    @staticmethod
    def default_takeaway_price(price_dine_in) -> Decimal:
        """Takeaway price implied by the current policy for a new item."""
        from settings.models import TakeawayPolicy
        from settings.services import SettingsService

        settings_obj = SettingsService.get_settings()
        if settings_obj.takeaway_policy == TakeawayPolicy.PERCENTAGE_DISCOUNT:
            discount = percentage_of(price_dine_in, settings_obj.takeaway_discount_percentage)
            return quantize(Decimal(price_dine_in) - discount)
        return quantize(price_dine_in)

    @staticmethod
    def apply_takeaway_policy(policy, discount_percentage) -> int:
        """
        Rewrites takeaway prices of every menu item for ``policy``. Custom
        per-item pricing leaves prices untouched. Returns the number of
        items changed.
        """
        from settings.models import TakeawayPolicy

        if policy == TakeawayPolicy.CUSTOM_PER_ITEM:
            return 0

        updated = []
        for item in MenuItem.objects.select_for_update():
            if policy == TakeawayPolicy.SAME_AS_DINE_IN:
                item.price_takeaway = item.price_dine_in
            else:
                discount = percentage_of(item.price_dine_in, discount_percentage)
                item.price_takeaway = quantize(item.price_dine_in - discount)
            updated.append(item)
        MenuItem.objects.bulk_update(updated, ["price_takeaway"])
        logger.info(f"Takeaway pricing applied to {len(updated)} items")
        return len(updated)

    # --- categories ---------------------------------------------------------

    def create_category(self, data, user) -> Category:
        category = Category.objects.create(created_by=user, **data)
        logger.info(f"Category {category.name_en} created by {user.username}")
        self.broadcaster.to_all("category-added", {"category": self._category_payload(category)})
        return category

    def update_category(self, category, data, user) -> Category:
        for field, value in data.items():
            setattr(category, field, value)
        category.save()
        logger.info(f"Category {category.name_en} updated by {user.username}")
        self.broadcaster.to_all("category-updated", {"category": self._category_payload(category)})
        return category

    def delete_category(self, category, user) -> None:
        in_use = category.menu_items.count()
        if in_use:
            raise ReferencedResource(
                f"Cannot delete category. {in_use} menu items are using it."
            )
        category_id = category.pk
        category.delete()
        logger.info(f"Category {category.name_en} deleted by {user.username}")
        self.broadcaster.to_all("category-deleted", {"categoryId": category_id})

    # --- add-ons ------------------------------------------------------------

    def create_addon(self, data, user) -> Addon:
        addon = Addon.objects.create(created_by=user, **data)
        logger.info(f"Add-on {addon.name_en} created by {user.username}")
        self.broadcaster.to_all("addon-added", {"addon": self._addon_payload(addon)})
        return addon

    def update_addon(self, addon, data, user) -> Addon:
        for field, value in data.items():
            setattr(addon, field, value)
        addon.save()
        logger.info(f"Add-on {addon.name_en} updated by {user.username}")
        self.broadcaster.to_all("addon-updated", {"addon": self._addon_payload(addon)})
        return addon

    def delete_addon(self, addon, user) -> None:
        in_use = addon.menu_items.count()
        if in_use:
            raise ReferencedResource(
                f"Cannot delete add-on. {in_use} menu items are using it."
            )
        addon_id = addon.pk
        addon.delete()
        logger.info(f"Add-on {addon.name_en} deleted by {user.username}")
        self.broadcaster.to_all("addon-deleted", {"addonId": addon_id})

    # --- menu items ---------------------------------------------------------

    @transaction.atomic
    def _save_item(self, item, data):
        add_ons = data.pop("add_ons", None)
        for field, value in data.items():
            setattr(item, field, value)
        item.save()
        if add_ons is not None:
            item.add_ons.set(add_ons)
        return item

    def create_item(self, data, user) -> MenuItem:
        data = dict(data)
        if data.get("price_takeaway") is None:
            data["price_takeaway"] = self.default_takeaway_price(data["price_dine_in"])
        item = self._save_item(MenuItem(created_by=user, updated_by=user), data)
        logger.info(f"Menu item {item.name_en} created by {user.username}")
        self._announce_item("created", item)
        return item

    def update_item(self, item, data, user) -> MenuItem:
        item.updated_by = user
        self._save_item(item, dict(data))
        logger.info(f"Menu item {item.name_en} updated by {user.username}")
        self._announce_item("updated", item)
        return item

    def delete_item(self, item, user) -> None:
        if item.image_public_id:
            try:
                self.image_service.delete_image(item.image_public_id)
            except DependencyFailure as e:
                logger.error(f"Image delete failed for {item.name_en}, deleting item anyway: {e}")

        item_id = item.pk
        item.delete()
        logger.info(f"Menu item {item.name_en} deleted by {user.username}")
        self.broadcaster.to_all("menu-updated", {"action": "deleted", "menuItemId": item_id})

    def set_availability(self, item, available: bool, user) -> MenuItem:
        """
        Manual availability override. A tracked item with no stock stays
        unavailable.
        """
        item.available = available
        item.updated_by = user
        item.save(update_fields=["available", "updated_by", "updated_at"])
        logger.info(f"Menu item {item.name_en} availability set to {item.available} by {user.username}")
        self._announce_item("availability-changed", item)
        return item

    def announce_stock_change(self, item_id):
        try:
            item = MenuItem.objects.get(pk=item_id)
        except MenuItem.DoesNotExist:
            raise NotFound("Menu item not found")
        self._announce_item("stock-updated", item)

    # --- payloads -----------------------------------------------------------

    def _announce_item(self, action, item):
        from ..serializers import MenuItemSerializer

        self.broadcaster.to_all(
            "menu-updated", {"action": action, "menuItem": MenuItemSerializer(item).data}
        )

    @staticmethod
    def _category_payload(category):
        from ..serializers import CategorySerializer

        return CategorySerializer(category).data

    @staticmethod
    def _addon_payload(addon):
        from ..serializers import AddonSerializer

        return AddonSerializer(addon).data


menu_service = MenuService()
