from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

ZERO = Decimal("0.00")


def money_field(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, **kwargs)


class DailyAnalytics(models.Model):
    """
    Running totals for one local calendar day. Rows are only ever changed
    with ``F()`` increments so concurrent payments never lose an update.
    """

    date = models.DateField(unique=True)
    total_orders = models.PositiveIntegerField(default=0)
    completed_orders = models.PositiveIntegerField(default=0)
    cancelled_orders = models.PositiveIntegerField(default=0)
    total_revenue = money_field()
    total_waste_cost = money_field()
    cash_total = money_field()
    card_total = money_field()
    mobile_money_total = money_field()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date"]
        verbose_name = _("Daily Analytics")
        verbose_name_plural = _("Daily Analytics")

    def __str__(self):
        return f"Analytics for {self.date}"


class WaitressSales(models.Model):
    day = models.ForeignKey(
        DailyAnalytics, on_delete=models.CASCADE, related_name="waitress_sales"
    )
    waitress = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="daily_sales",
    )
    waitress_name = models.CharField(max_length=150)
    orders = models.PositiveIntegerField(default=0)
    revenue = money_field()
    cancellations = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-revenue"]
        constraints = [
            models.UniqueConstraint(
                fields=["day", "waitress"], name="unique_waitress_sales_per_day"
            ),
        ]

    def __str__(self):
        return f"{self.waitress_name} on {self.day.date}"


class HourlySales(models.Model):
    day = models.ForeignKey(
        DailyAnalytics, on_delete=models.CASCADE, related_name="hourly_sales"
    )
    hour = models.PositiveSmallIntegerField(help_text=_("Local hour (0-23) the order was placed."))
    orders = models.PositiveIntegerField(default=0)
    revenue = money_field()

    class Meta:
        ordering = ["hour"]
        constraints = [
            models.UniqueConstraint(
                fields=["day", "hour"], name="unique_hourly_sales_per_day"
            ),
            models.CheckConstraint(
                condition=models.Q(hour__lte=23), name="hourly_sales_hour_range"
            ),
        ]

    def __str__(self):
        return f"{self.day.date} {self.hour:02d}:00"


class ItemSales(models.Model):
    day = models.ForeignKey(
        DailyAnalytics, on_delete=models.CASCADE, related_name="item_sales"
    )
    menu_item = models.ForeignKey(
        "menu.MenuItem",
        on_delete=models.SET_NULL,
        null=True,
        related_name="daily_sales",
    )
    item_name_en = models.CharField(max_length=200)
    item_name_am = models.CharField(max_length=200, blank=True, default="")
    quantity_sold = models.PositiveIntegerField(default=0)
    revenue = money_field()

    class Meta:
        ordering = ["-quantity_sold"]
        constraints = [
            models.UniqueConstraint(
                fields=["day", "menu_item"], name="unique_item_sales_per_day"
            ),
        ]

    def __str__(self):
        return f"{self.item_name_en} x{self.quantity_sold} on {self.day.date}"
