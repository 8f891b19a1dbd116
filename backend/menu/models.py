from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class PrepStation(models.TextChoices):
    KITCHEN = "kitchen", _("Kitchen")
    JUICEBAR = "juicebar", _("Juice Bar")
    NONE = "none", _("None")


class StockUnit(models.TextChoices):
    PIECES = "pieces", _("Pieces")
    BOTTLES = "bottles", _("Bottles")
    CANS = "cans", _("Cans")
    LITERS = "liters", _("Liters")
    SERVINGS = "servings", _("Servings")
    PLATES = "plates", _("Plates")


class BilingualNameMixin(models.Model):
    name_en = models.CharField(_("English name"), max_length=200)
    name_am = models.CharField(_("Amharic name"), max_length=200)

    class Meta:
        abstract = True

    @property
    def name(self):
        return {"en": self.name_en, "am": self.name_am}


class StockTrackedMixin(models.Model):
    """
    Optional stock counter. When tracking is enabled and the counter is at
    zero the row is unavailable, whatever the caller set.
    """

    stock_enabled = models.BooleanField(_("stock tracking enabled"), default=False)
    current_stock = models.PositiveIntegerField(_("current stock"), default=0)
    min_stock = models.PositiveIntegerField(
        _("minimum stock"),
        default=10,
        help_text=_("Low stock alerts fire at or below this level."),
    )
    stock_unit = models.CharField(
        max_length=20, choices=StockUnit.choices, default=StockUnit.PIECES
    )
    available = models.BooleanField(_("available"), default=True, db_index=True)

    class Meta:
        abstract = True

    @property
    def is_depleted(self):
        return self.stock_enabled and self.current_stock <= 0

    @property
    def is_low_stock(self):
        return self.stock_enabled and 0 < self.current_stock <= self.min_stock

    def save(self, *args, **kwargs):
        if self.is_depleted and self.available:
            self.available = False
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "available" not in update_fields:
                kwargs["update_fields"] = list(update_fields) + ["available"]
        super().save(*args, **kwargs)


class Category(BilingualNameMixin, models.Model):
    prep_station = models.CharField(
        max_length=10, choices=PrepStation.choices, default=PrepStation.KITCHEN
    )
    requires_preparation = models.BooleanField(default=True)
    auto_deduct_stock = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "categories"
        ordering = ["name_en"]
        indexes = [models.Index(fields=["prep_station"], name="category_station_idx")]

    def __str__(self):
        return self.name_en


class Addon(BilingualNameMixin, StockTrackedMixin):
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    stations = models.JSONField(
        default=list,
        help_text=_("Stations offering this add-on (kitchen and/or juicebar)."),
    )
    is_optional = models.BooleanField(default=True)
    image_url = models.URLField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name_en"]

    def __str__(self):
        return f"{self.name_en} (+{self.price})"


class MenuItem(BilingualNameMixin, StockTrackedMixin):
    description_en = models.TextField(blank=True, default="")
    description_am = models.TextField(blank=True, default="")
    category = models.ForeignKey(
        Category, on_delete=models.PROTECT, related_name="menu_items"
    )
    price_dine_in = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    price_takeaway = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    prep_station = models.CharField(
        max_length=10, choices=PrepStation.choices, default=PrepStation.KITCHEN
    )
    requires_preparation = models.BooleanField(
        default=True,
        help_text=_("Items that need no preparation are ready as soon as they are ordered."),
    )
    prep_time_minutes = models.PositiveIntegerField(default=15)
    deduct_on_order = models.BooleanField(
        default=True, help_text=_("Deduct stock automatically when ordered.")
    )
    add_ons = models.ManyToManyField(Addon, blank=True, related_name="menu_items")
    image_url = models.URLField(max_length=500, blank=True, default="")
    image_public_id = models.CharField(max_length=255, blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category__name_en", "name_en"]
        indexes = [
            models.Index(fields=["prep_station"], name="menuitem_station_idx"),
            models.Index(fields=["category", "available"], name="menuitem_category_avail_idx"),
        ]

    def __str__(self):
        return self.name_en

    @property
    def description(self):
        return {"en": self.description_en, "am": self.description_am}

    def price_for(self, order_type):
        if order_type == "takeaway":
            return self.price_takeaway
        return self.price_dine_in
