import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from django.db import transaction

from core_backend.exceptions import MenuItemNotFound, StockTrackingDisabled, ValidationFailed
from notifications import rooms
from notifications.services import broadcaster as default_broadcaster

from ..models import MenuItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LowStockAlert:
    item_id: int
    item_name: dict
    current_stock: int
    min_stock: int
    unit: str

    def as_event(self):
        return {
            "itemId": self.item_id,
            "itemName": self.item_name,
            "currentStock": self.current_stock,
            "minStock": self.min_stock,
            "unit": self.unit,
        }

    @classmethod
    def for_item(cls, menu_item):
        return cls(
            item_id=menu_item.pk,
            item_name=menu_item.name,
            current_stock=menu_item.current_stock,
            min_stock=menu_item.min_stock,
            unit=menu_item.stock_unit,
        )


@dataclass(frozen=True)
class StockChange:
    item_id: int
    name: str
    previous_stock: int
    new_stock: int
    available: bool
    deducted: int = 0
    low_stock_alert: Optional[LowStockAlert] = None

    @property
    def low_stock(self):
        return self.low_stock_alert is not None

    def as_dict(self):
        return {
            "itemId": self.item_id,
            "name": self.name,
            "previousStock": self.previous_stock,
            "newStock": self.new_stock,
            "deducted": self.deducted,
            "available": self.available,
        }


class StockService:
    """
    Every change to a tracked stock counter goes through here. Each method
    locks the menu item row for the read-modify-write, floors the counter
    at zero and applies one availability rule: a tracked item at zero is
    unavailable. Owner restocks above zero make it available again.
    """

    ADD = "add"
    REMOVE = "remove"
    SET = "set"
    ACTIONS = (ADD, REMOVE, SET)

    @staticmethod
    def _locked(item_id) -> MenuItem:
        try:
            return MenuItem.objects.select_for_update().get(pk=item_id)
        except MenuItem.DoesNotExist:
            raise MenuItemNotFound()

    @staticmethod
    def _apply(
        menu_item: MenuItem, new_stock: int, deducted: int = 0, user=None, restock=False
    ) -> StockChange:
        previous = menu_item.current_stock
        menu_item.current_stock = max(0, new_stock)
        if menu_item.current_stock <= 0:
            menu_item.available = False
        elif restock:
            menu_item.available = True
        fields = ["current_stock", "available", "updated_at"]
        if user is not None:
            menu_item.updated_by = user
            fields.append("updated_by")
        menu_item.save(update_fields=fields)

        return StockChange(
            item_id=menu_item.pk,
            name=menu_item.name_en,
            previous_stock=previous,
            new_stock=menu_item.current_stock,
            available=menu_item.available,
            deducted=deducted,
            low_stock_alert=LowStockAlert.for_item(menu_item) if menu_item.is_low_stock else None,
        )

    @staticmethod
    @transaction.atomic
    def deduct_for_order(item_id, quantity: int) -> Optional[StockChange]:
        """
        Deducts ``quantity`` for an ordered item. Returns None when the item
        does not track stock or is not set to deduct on order.
        """
        menu_item = StockService._locked(item_id)
        if not (menu_item.stock_enabled and menu_item.deduct_on_order):
            return None

        change = StockService._apply(
            menu_item, menu_item.current_stock - quantity, deducted=quantity
        )
        logger.info(
            f"Stock deducted for {menu_item.name_en}: {quantity} units "
            f"({change.previous_stock} -> {change.new_stock})"
        )
        return change

    @staticmethod
    @transaction.atomic
    def adjust(item_id, action: str, quantity: int, user=None) -> StockChange:
        """Owner stock adjustment: add, remove or set the counter."""
        if action not in StockService.ACTIONS:
            raise ValidationFailed('Invalid action. Use "add", "remove", or "set"')
        if quantity < 0:
            raise ValidationFailed("Quantity cannot be negative")

        menu_item = StockService._locked(item_id)
        if not menu_item.stock_enabled:
            raise StockTrackingDisabled()

        if action == StockService.ADD:
            new_stock = menu_item.current_stock + quantity
        elif action == StockService.REMOVE:
            new_stock = menu_item.current_stock - quantity
        else:
            new_stock = quantity

        change = StockService._apply(menu_item, new_stock, user=user, restock=True)
        logger.info(
            f"Stock updated for {menu_item.name_en}: {action} {quantity} "
            f"({change.previous_stock} -> {change.new_stock})"
        )
        return change

    @staticmethod
    def deduct_many(lines: Iterable[dict], broadcaster=None):
        """
        Deducts stock for ``[{"item_id", "quantity"}]``. Unknown ids are
        skipped. Each line commits on its own. Low stock alerts go to the
        owner room.
        """
        changes, alerts = [], []
        for line in lines:
            try:
                change = StockService.deduct_for_order(line["item_id"], line["quantity"])
            except MenuItemNotFound:
                logger.info(f"Menu item not found while deducting stock: {line['item_id']}")
                continue
            if change is None:
                continue
            changes.append(change)
            if change.low_stock:
                alerts.append(change.low_stock_alert)

        StockService.publish_low_stock_alerts(alerts, broadcaster)
        return changes, alerts

    @staticmethod
    def publish_low_stock_alerts(alerts, broadcaster=None):
        broadcaster = broadcaster or default_broadcaster
        for alert in alerts:
            broadcaster.to_room(rooms.OWNER, "low-stock-alert", alert.as_event())
