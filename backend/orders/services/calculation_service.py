import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from core_backend.exceptions import ItemsNotFound, ItemsUnavailable, ValidationFailed
from menu.models import Addon
from menu.services import menu_service
from payments.money import quantize

from ..models import Order, OrderItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricedAddOn:
    addon_id: int
    name_en: str
    name_am: str
    price: Decimal


@dataclass
class PricedLine:
    """One order line priced from the menu, ready to be persisted."""

    menu_item: object
    quantity: int
    price_per_unit: Decimal
    subtotal: Decimal
    variant: str = ""
    special_notes: str = ""
    add_ons: List[PricedAddOn] = field(default_factory=list)

    @property
    def auto_complete(self):
        return not self.menu_item.requires_preparation

    @property
    def initial_status(self):
        if self.auto_complete:
            return OrderItem.ItemStatus.READY
        return OrderItem.ItemStatus.PENDING

    def to_order_item(self, order) -> OrderItem:
        return OrderItem(
            order=order,
            menu_item=self.menu_item,
            name_en=self.menu_item.name_en,
            name_am=self.menu_item.name_am,
            variant=self.variant,
            quantity=self.quantity,
            price_per_unit=self.price_per_unit,
            special_notes=self.special_notes,
            subtotal=self.subtotal,
            prep_station=self.menu_item.prep_station,
            auto_complete=self.auto_complete,
            skip_kitchen=self.auto_complete,
            status=self.initial_status,
        )


class OrderCalculationService:
    """Line pricing, order totals and the aggregate order status."""

    @staticmethod
    def line_subtotal(price_per_unit, quantity, addon_prices=()) -> Decimal:
        """
        ``price_per_unit * quantity + quantity * sum(addon prices)``

        >>> OrderCalculationService.line_subtotal(Decimal("2.00"), 3)
        Decimal('6.00')
        """
        addons_total = sum((Decimal(price) for price in addon_prices), Decimal("0"))
        return quantize(Decimal(price_per_unit) * quantity + addons_total * quantity)

    @staticmethod
    def resolve_menu_items(lines, allow_unavailable=()):
        """
        Resolves every ``item_id`` in ``lines`` against the menu.

        Raises ``ItemsNotFound`` for unknown ids and ``ItemsUnavailable`` for
        items switched off, before anything is written. Ids in
        ``allow_unavailable`` (items the order already holds) are exempt
        from the availability check.
        """
        requested = [line["item_id"] for line in lines]
        menu_items = menu_service.get_items_by_ids(requested)
        missing = [item_id for item_id in dict.fromkeys(requested) if item_id not in menu_items]
        if missing:
            raise ItemsNotFound(missing)

        unavailable = [
            item.name_en
            for item in menu_items.values()
            if not item.available and item.pk not in allow_unavailable
        ]
        if unavailable:
            raise ItemsUnavailable(unavailable)
        return menu_items

    @staticmethod
    def resolve_add_ons(lines):
        requested = {addon_id for line in lines for addon_id in line.get("add_ons", [])}
        if not requested:
            return {}
        add_ons = Addon.objects.in_bulk(requested)
        missing = sorted(requested - set(add_ons))
        if missing:
            raise ValidationFailed(
                "Some add-ons not found",
                errors=[{"field": "add_ons", "message": f"Unknown add-on {addon_id}"} for addon_id in missing],
            )
        unavailable = [addon.name_en for addon in add_ons.values() if not addon.available]
        if unavailable:
            raise ItemsUnavailable(unavailable)
        return add_ons

    @staticmethod
    def price_lines(lines, order_type, allow_unavailable=()) -> List[PricedLine]:
        """
        Prices request lines ``[{item_id, quantity, variant?, special_notes?,
        add_ons?}]`` at the current menu prices for ``order_type``.
        """
        menu_items = OrderCalculationService.resolve_menu_items(lines, allow_unavailable)
        add_ons = OrderCalculationService.resolve_add_ons(lines)

        priced = []
        for line in lines:
            menu_item = menu_items[line["item_id"]]
            selected = [add_ons[addon_id] for addon_id in line.get("add_ons", [])]
            price = menu_item.price_for(order_type)
            priced.append(
                PricedLine(
                    menu_item=menu_item,
                    quantity=line["quantity"],
                    price_per_unit=price,
                    subtotal=OrderCalculationService.line_subtotal(
                        price, line["quantity"], [addon.price for addon in selected]
                    ),
                    variant=line.get("variant", ""),
                    special_notes=line.get("special_notes", ""),
                    add_ons=[
                        PricedAddOn(addon.pk, addon.name_en, addon.name_am, addon.price)
                        for addon in selected
                    ],
                )
            )
        return priced

    @staticmethod
    def total(priced_lines) -> Decimal:
        return quantize(sum((line.subtotal for line in priced_lines), Decimal("0")))

    @staticmethod
    def aggregate_status(item_statuses, within_grace: bool) -> str:
        """
        Order status derived from the statuses of the items that need
        preparation. Items that need none are always ready and do not count.

        Precedence: all ready -> ready; any in-progress -> in-progress;
        all pending -> pending inside the grace window, confirmed after it.
        A mix of ready and pending items means preparation has started, so
        it is in-progress.
        """
        statuses = list(item_statuses)
        if not statuses:
            return Order.Status.READY

        ready = OrderItem.ItemStatus.READY
        in_progress = OrderItem.ItemStatus.IN_PROGRESS
        pending = OrderItem.ItemStatus.PENDING

        if all(s == ready for s in statuses):
            return Order.Status.READY
        if any(s == in_progress for s in statuses):
            return Order.Status.IN_PROGRESS
        if all(s == pending for s in statuses):
            return Order.Status.PENDING if within_grace else Order.Status.CONFIRMED
        return Order.Status.IN_PROGRESS
