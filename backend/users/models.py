import re

from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.contrib.auth.hashers import check_password, make_password
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

PIN_PATTERN = re.compile(r"^\d{4}$")


def validate_pin_format(raw_pin):
    if not raw_pin or not PIN_PATTERN.match(str(raw_pin)):
        raise ValidationError(_("PIN must be exactly 4 digits"))


class UserManager(BaseUserManager):
    def create_user(self, username, pin, full_name="", role="waitress", **extra_fields):
        if not username:
            raise ValueError("The username must be set")
        validate_pin_format(pin)
        user = self.model(
            username=username.strip().lower(),
            full_name=full_name,
            role=role,
            **extra_fields,
        )
        user.set_unusable_password()
        user.pin = make_password(str(pin))
        user.save(using=self._db)
        return user

    def create_superuser(self, username, pin, full_name="", **extra_fields):
        extra_fields["role"] = User.Role.OWNER
        return self.create_user(username, pin, full_name=full_name, **extra_fields)

    def get_by_natural_key(self, username):
        return self.get(username__iexact=username)


class User(AbstractBaseUser):
    class Role(models.TextChoices):
        OWNER = "owner", _("Owner")
        WAITRESS = "waitress", _("Waitress")
        KITCHEN = "kitchen", _("Kitchen")
        JUICEBAR = "juicebar", _("Juice Bar")

    username = models.CharField(
        _("username"),
        max_length=50,
        unique=True,
        help_text=_("Lower-case login name used on the POS."),
    )
    full_name = models.CharField(_("full name"), max_length=150)
    role = models.CharField(
        _("role"), max_length=20, choices=Role.choices, default=Role.WAITRESS
    )
    pin = models.CharField(
        _("PIN"),
        max_length=128,
        help_text=_("Hashed 4 digit PIN for POS login."),
    )
    is_active = models.BooleanField(_("active"), default=True, db_index=True)
    created_by = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_staff",
    )
    date_joined = models.DateTimeField(_("date joined"), default=timezone.now)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = ["full_name"]

    class Meta:
        ordering = ["full_name"]
        indexes = [
            models.Index(fields=["role", "is_active"], name="user_role_active_idx"),
        ]

    def __str__(self):
        return self.username

    def save(self, *args, **kwargs):
        if self.username:
            self.username = self.username.strip().lower()
        super().save(*args, **kwargs)

    @property
    def is_owner(self):
        return self.role == self.Role.OWNER

    @property
    def is_station(self):
        return self.role in (self.Role.KITCHEN, self.Role.JUICEBAR)

    def set_pin(self, raw_pin):
        validate_pin_format(raw_pin)
        self.pin = make_password(str(raw_pin))
        self.save(update_fields=["pin", "updated_at"])

    def check_pin(self, raw_pin):
        if not self.pin or not raw_pin:
            return False
        return check_password(str(raw_pin), self.pin)
