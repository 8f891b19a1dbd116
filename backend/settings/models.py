from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

SINGLETON_KEY = "restaurant"


class Language(models.TextChoices):
    ENGLISH = "en", _("English")
    AMHARIC = "am", _("Amharic")


class Theme(models.TextChoices):
    LIGHT = "light", _("Light")
    DARK = "dark", _("Dark")
    AUTO = "auto", _("Auto")


class TakeawayPolicy(models.TextChoices):
    SAME_AS_DINE_IN = "same-as-dinein", _("Same as dine-in")
    PERCENTAGE_DISCOUNT = "percentage-discount", _("Percentage discount")
    CUSTOM_PER_ITEM = "custom-per-item", _("Custom per item")


class RestaurantSettings(models.Model):
    """
    Restaurant-wide configuration. Exactly one row exists, identified by
    ``key``; always obtain it through ``SettingsService.get_settings()``.
    """

    key = models.CharField(
        max_length=20,
        default=SINGLETON_KEY,
        editable=False,
        help_text=_("Fixed key guaranteeing a single settings row."),
    )

    # Appearance
    language = models.CharField(
        max_length=2, choices=Language.choices, default=Language.AMHARIC
    )
    theme = models.CharField(max_length=10, choices=Theme.choices, default=Theme.LIGHT)

    # Order management
    grace_window_minutes = models.PositiveSmallIntegerField(
        default=3,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text=_("Minutes a waitress may edit or freely cancel a new order."),
    )

    # Takeaway pricing
    takeaway_policy = models.CharField(
        max_length=25,
        choices=TakeawayPolicy.choices,
        default=TakeawayPolicy.SAME_AS_DINE_IN,
    )
    takeaway_discount_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )

    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Restaurant Settings")
        verbose_name_plural = _("Restaurant Settings")
        constraints = [
            models.UniqueConstraint(fields=["key"], name="unique_restaurant_settings_key"),
        ]

    def __str__(self):
        return "Restaurant Settings"
