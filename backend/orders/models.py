import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from menu.models import PrepStation


class OrderSequence(models.Model):
    """
    Per-day counter behind ``ORD-YYYYMMDD-NNNN`` order numbers. The counter
    is bumped with an ``F()`` update inside a transaction so concurrent
    order creation never reads the same value twice.
    """

    date = models.DateField(unique=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Order Sequence")

    def __str__(self):
        return f"{self.date}: {self.last_value}"

    @classmethod
    def next_number(cls, date=None) -> str:
        date = date or timezone.localdate()
        with transaction.atomic():
            sequence, _created = cls.objects.get_or_create(date=date)
            cls.objects.filter(pk=sequence.pk).update(last_value=F("last_value") + 1)
            sequence.refresh_from_db(fields=["last_value"])
        return cls.format_number(date, sequence.last_value)

    @staticmethod
    def format_number(date, value) -> str:
        return f"ORD-{date:%Y%m%d}-{value:04d}"

    @classmethod
    def resync(cls, date=None) -> int:
        """
        Moves the day's counter past the highest order number already stored
        for that day. Used after a collision with a number the counter did
        not hand out (imported or manually created orders).
        """
        date = date or timezone.localdate()
        prefix = cls.format_number(date, 0)[:-4]
        with transaction.atomic():
            sequence, _created = cls.objects.get_or_create(date=date)
            sequence = cls.objects.select_for_update().get(pk=sequence.pk)
            taken = [
                int(number[len(prefix):])
                for number in Order.objects.filter(order_number__startswith=prefix).values_list(
                    "order_number", flat=True
                )
                if number[len(prefix):].isdigit()
            ]
            highest = max(taken, default=0)
            if highest > sequence.last_value:
                sequence.last_value = highest
                sequence.save(update_fields=["last_value"])
        return sequence.last_value


class Order(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")  # Inside the grace window
        CONFIRMED = "confirmed", _("Confirmed")
        IN_PROGRESS = "in-progress", _("In Progress")
        READY = "ready", _("Ready")
        COMPLETED = "completed", _("Completed")  # Paid
        CANCELLED = "cancelled", _("Cancelled")

    class OrderType(models.TextChoices):
        DINE_IN = "dine-in", _("Dine In")
        TAKEAWAY = "takeaway", _("Takeaway")

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid", _("Unpaid")
        PAID = "paid", _("Paid")

    class CancellationPhase(models.TextChoices):
        GRACE_WINDOW = "grace_window", _("Grace Window")
        CONFIRMED = "confirmed", _("Confirmed")
        IN_PROGRESS = "in_progress", _("In Progress")
        READY = "ready", _("Ready")

    ACTIVE_STATUSES = (
        Status.PENDING,
        Status.CONFIRMED,
        Status.IN_PROGRESS,
        Status.READY,
    )
    TERMINAL_STATUSES = (Status.COMPLETED, Status.CANCELLED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=20, unique=True)
    order_type = models.CharField(max_length=10, choices=OrderType.choices)
    customer_name = models.CharField(max_length=100, blank=True, default="")
    customer_phone = models.CharField(max_length=30, blank=True, default="")

    waitress = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    waitress_name = models.CharField(
        max_length=100, help_text=_("Waitress name at the time the order was placed.")
    )

    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    grand_total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=12, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID
    )
    grace_window_ends_at = models.DateTimeField(
        help_text=_("The owning waitress may edit or freely cancel until this time.")
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    # --- Cancellation ---
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    cancellation_reason = models.CharField(max_length=255, blank=True, default="")
    cancellation_phase = models.CharField(
        max_length=12, choices=CancellationPhase.choices, blank=True, default=""
    )
    cancellation_details = models.TextField(blank=True, default="")
    waste_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    wasted_items = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=["status", "-created_at"], name="order_status_created_idx"),
            models.Index(fields=["waitress", "status"], name="order_waitress_status_idx"),
            models.Index(fields=["-created_at"], name="order_created_idx"),
        ]

    def __str__(self):
        return f"Order {self.order_number} ({self.order_type}) - {self.status}"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    def within_grace_window(self, now=None):
        return (now or timezone.now()) < self.grace_window_ends_at

    def effective_status(self, now=None):
        """A pending order is confirmed once its grace window has passed."""
        if self.status == self.Status.PENDING and not self.within_grace_window(now):
            return self.Status.CONFIRMED
        return self.status

    def recalculate_totals(self):
        """Recomputes ``subtotal``/``grand_total`` from the saved items."""
        total = sum((item.subtotal for item in self.items.all()), Decimal("0.00"))
        self.subtotal = total
        self.grand_total = total
        return total


class OrderItem(models.Model):
    class ItemStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        IN_PROGRESS = "in-progress", _("In Progress")
        READY = "ready", _("Ready")

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    menu_item = models.ForeignKey(
        "menu.MenuItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
        help_text=_("Source menu item. The snapshot fields below are authoritative."),
    )
    name_en = models.CharField(max_length=200)
    name_am = models.CharField(max_length=200)
    variant = models.CharField(max_length=100, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    price_per_unit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Price of the menu item at the time of sale."),
    )
    special_notes = models.TextField(blank=True, default="")
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    prep_station = models.CharField(
        max_length=10, choices=PrepStation.choices, default=PrepStation.KITCHEN
    )
    auto_complete = models.BooleanField(
        default=False, help_text=_("Needs no preparation; created ready.")
    )
    skip_kitchen = models.BooleanField(default=False)
    status = models.CharField(
        max_length=12, choices=ItemStatus.choices, default=ItemStatus.PENDING
    )

    class Meta:
        ordering = ["id"]
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        indexes = [
            models.Index(fields=["order", "prep_station"], name="item_order_station_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1), name="order_item_quantity_positive"
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.name_en} in Order {self.order.order_number}"

    @property
    def name(self):
        return {"en": self.name_en, "am": self.name_am}

    @property
    def routed_to_station(self):
        return not self.skip_kitchen and self.prep_station in (
            PrepStation.KITCHEN,
            PrepStation.JUICEBAR,
        )


class OrderItemAddOn(models.Model):
    order_item = models.ForeignKey(OrderItem, on_delete=models.CASCADE, related_name="add_ons")
    addon_id = models.PositiveBigIntegerField(null=True, blank=True)
    name_en = models.CharField(max_length=200)
    name_am = models.CharField(max_length=200, blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name_en} ({self.price})"


class CancellationLog(models.Model):
    """
    Audit record written once per cancelled order. Only the review fields
    change afterwards.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="cancellation_logs")
    order_number = models.CharField(max_length=20)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="cancellations",
    )
    cancelled_by_name = models.CharField(max_length=100)
    phase = models.CharField(max_length=12, choices=Order.CancellationPhase.choices)
    reason = models.CharField(max_length=255)
    details = models.TextField(blank=True, default="")
    items_lost = models.JSONField(default=list)
    waste_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    requires_review = models.BooleanField(default=False)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["requires_review", "-created_at"], name="cancel_review_idx"),
        ]

    def __str__(self):
        return f"Cancellation of {self.order_number} ({self.phase})"
