import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from orders.models import Order


class PaymentMethod(models.TextChoices):
    CASH = "cash", _("Cash")
    CARD = "card", _("Card")
    MOBILE_MONEY = "mobile-money", _("Mobile Money")
    SPLIT = "split", _("Split")


class Payment(models.Model):
    """
    Settlement of a single Order. Written once when the order is paid and
    never changed afterwards.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField(
        Order, on_delete=models.PROTECT, related_name="payment"
    )
    order_number = models.CharField(max_length=20)
    payment_method = models.CharField(max_length=15, choices=PaymentMethod.choices)
    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("The order grand total at the time of payment."),
    )
    amount_received = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    change_due = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    transaction_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text=_("Reference from the card terminal or mobile money provider."),
    )
    waitress = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        indexes = [
            models.Index(fields=["-created_at"], name="payment_created_idx"),
            models.Index(fields=["waitress", "-created_at"], name="payment_waitress_idx"),
        ]

    def __str__(self):
        return f"Payment for Order {self.order_number} ({self.payment_method}) - {self.total_amount}"


class SplitPayment(models.Model):
    """One method's share of a ``split`` payment."""

    payment = models.ForeignKey(
        Payment, on_delete=models.CASCADE, related_name="split_payments"
    )
    method = models.CharField(
        max_length=15,
        choices=[
            (PaymentMethod.CASH.value, PaymentMethod.CASH.label),
            (PaymentMethod.CARD.value, PaymentMethod.CARD.label),
            (PaymentMethod.MOBILE_MONEY.value, PaymentMethod.MOBILE_MONEY.label),
        ],
    )
    amount = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.method}: {self.amount}"
