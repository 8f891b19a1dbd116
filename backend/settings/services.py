import logging
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from core_backend.exceptions import InvalidPin, ValidationFailed
from notifications import rooms
from notifications.services import broadcaster as default_broadcaster

from .models import SINGLETON_KEY, RestaurantSettings, TakeawayPolicy

logger = logging.getLogger(__name__)

RESET_CONFIRMATION = "DELETE ALL DATA"


class SettingsService:
    """
    Owns the restaurant settings singleton and the owner's maintenance
    actions (display clearing, new day, analytics reset).
    """

    @staticmethod
    def get_settings() -> RestaurantSettings:
        """
        Returns the settings row, creating it with defaults on first use.
        Concurrent first calls are resolved by the unique key.
        """
        try:
            return RestaurantSettings.objects.get(key=SINGLETON_KEY)
        except RestaurantSettings.DoesNotExist:
            pass

        try:
            with transaction.atomic():
                settings_obj = RestaurantSettings.objects.create(key=SINGLETON_KEY)
            logger.info("Created default restaurant settings")
            return settings_obj
        except IntegrityError:
            return RestaurantSettings.objects.get(key=SINGLETON_KEY)

    @staticmethod
    def grace_window_minutes() -> int:
        return SettingsService.get_settings().grace_window_minutes

    @staticmethod
    def _save(settings_obj, user, fields):
        settings_obj.updated_by = user
        try:
            settings_obj.full_clean()
        except DjangoValidationError as e:
            raise ValidationFailed(
                errors=[
                    {"field": field, "message": message}
                    for field, messages in e.message_dict.items()
                    for message in messages
                ]
            )
        settings_obj.save(update_fields=list(fields) + ["updated_by", "updated_at"])
        return settings_obj

    @staticmethod
    def update_appearance(user, language=None, theme=None, broadcaster=None):
        settings_obj = SettingsService.get_settings()
        fields = []
        if language:
            settings_obj.language = language
            fields.append("language")
        if theme:
            settings_obj.theme = theme
            fields.append("theme")
        SettingsService._save(settings_obj, user, fields)

        logger.info(f"Appearance settings updated by {user.username}")
        (broadcaster or default_broadcaster).to_all(
            "settings-updated",
            {"language": settings_obj.language, "theme": settings_obj.theme},
        )
        return settings_obj

    @staticmethod
    def update_order_management(user, grace_window_minutes, broadcaster=None):
        if not 1 <= int(grace_window_minutes) <= 5:
            raise ValidationFailed(
                "Grace window must be between 1 and 5 minutes",
                errors=[{"field": "grace_window_minutes", "message": "Must be between 1 and 5"}],
            )

        settings_obj = SettingsService.get_settings()
        settings_obj.grace_window_minutes = int(grace_window_minutes)
        SettingsService._save(settings_obj, user, ["grace_window_minutes"])

        logger.info(
            f"Grace window updated to {grace_window_minutes} minutes by {user.username}"
        )
        (broadcaster or default_broadcaster).to_all(
            "settings-updated", {"graceWindowMinutes": settings_obj.grace_window_minutes}
        )
        return settings_obj

    @staticmethod
    def update_takeaway_pricing(
        user, policy, discount_percentage=None, apply_to_existing=False, broadcaster=None
    ):
        from menu.services import MenuService

        broadcaster = broadcaster or default_broadcaster
        settings_obj = SettingsService.get_settings()
        settings_obj.takeaway_policy = policy
        fields = ["takeaway_policy"]

        if policy == TakeawayPolicy.PERCENTAGE_DISCOUNT:
            if discount_percentage is None or not Decimal(0) <= Decimal(discount_percentage) <= Decimal(100):
                raise ValidationFailed(
                    "Discount percentage must be between 0 and 100",
                    errors=[{"field": "discount_percentage", "message": "Must be between 0 and 100"}],
                )
            settings_obj.takeaway_discount_percentage = Decimal(discount_percentage)
            fields.append("takeaway_discount_percentage")

        with transaction.atomic():
            SettingsService._save(settings_obj, user, fields)
            updated_count = 0
            if apply_to_existing:
                updated_count = MenuService.apply_takeaway_policy(
                    policy, settings_obj.takeaway_discount_percentage
                )

        logger.info(f"Takeaway pricing updated by {user.username}")
        broadcaster.to_all(
            "settings-updated",
            {
                "takeawayPricing": {
                    "policy": settings_obj.takeaway_policy,
                    "discountPercentage": settings_obj.takeaway_discount_percentage,
                }
            },
        )
        if apply_to_existing:
            broadcaster.to_all(
                "menu-updated",
                {"action": "bulk-price-update", "message": "Prices updated for all items"},
            )
        return settings_obj, updated_count

    # --- PIN confirmed owner actions --------------------------------------

    @staticmethod
    def _require_pin(user, pin):
        if not user.check_pin(pin):
            raise InvalidPin()

    @staticmethod
    def clear_station_display(user, station, pin, broadcaster=None) -> int:
        """
        Cancels every active order with items routed to ``station`` and tells
        that station's displays to clear. Returns the number of orders.
        """
        from orders.models import Order

        if station not in rooms.STATION_ROOMS:
            raise ValidationFailed(f"Unknown station: {station}")
        SettingsService._require_pin(user, pin)

        active = Order.objects.filter(
            status__in=[Order.Status.PENDING, Order.Status.CONFIRMED, Order.Status.IN_PROGRESS],
            items__prep_station=station,
        ).distinct()
        count = Order.objects.filter(pk__in=active.values("pk")).update(
            status=Order.Status.CANCELLED,
            cancelled_at=timezone.now(),
            cancelled_by=user,
            cancellation_reason="Display cleared by owner",
        )

        logger.warning(
            f"{station.capitalize()} display cleared by {user.username} - {count} orders affected"
        )
        (broadcaster or default_broadcaster).to_room(
            rooms.role_room(station),
            "clear-display",
            {"message": f"{station.capitalize()} display cleared by owner"},
        )
        return count

    @staticmethod
    def start_new_day(user, pin, broadcaster=None):
        SettingsService._require_pin(user, pin)
        logger.info(f"New day started by {user.username}")
        (broadcaster or default_broadcaster).to_all(
            "new-day-started",
            {"message": "New business day started", "date": timezone.localdate().isoformat()},
        )

    @staticmethod
    def reset_analytics(user, pin, confirmation) -> int:
        from reports.models import DailyAnalytics

        if confirmation != RESET_CONFIRMATION:
            raise ValidationFailed(f'Invalid confirmation. Type "{RESET_CONFIRMATION}" exactly.')
        SettingsService._require_pin(user, pin)

        _, deleted_by_model = DailyAnalytics.objects.all().delete()
        deleted = deleted_by_model.get(DailyAnalytics._meta.label, 0)
        logger.warning(f"All analytics data reset by {user.username} ({deleted} rows deleted)")
        return deleted
