import logging
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone
from rest_framework_simplejwt.tokens import RefreshToken

from core_backend.exceptions import Forbidden, NotFound, ValidationFailed
from notifications import rooms
from notifications.services import broadcaster as default_broadcaster

from .models import User, validate_pin_format

logger = logging.getLogger(__name__)

STAFF_FIELDS = ("full_name", "role", "is_active")


class UserService:
    """Login and staff management for the POS."""

    @staticmethod
    def authenticate_pos_user(username: str, pin: str) -> User | None:
        """
        Returns the active user matching ``username`` (case-insensitive) and
        ``pin``, or None. A successful login stamps ``last_login``.
        """
        try:
            user = User.objects.get(username__iexact=username.strip())
        except User.DoesNotExist:
            return None

        if not user.is_active:
            logger.info(f"Login rejected for inactive user {user.username}")
            return None
        if not user.check_pin(pin):
            return None

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])
        return user

    @staticmethod
    def generate_tokens_for_user(user: User) -> dict:
        refresh = RefreshToken.for_user(user)
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
        }

    # --- staff management -------------------------------------------------

    @staticmethod
    def get_staff(user_id) -> User:
        try:
            return User.objects.get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound("Staff member not found")

    @staticmethod
    def create_staff(data: dict, created_by: User, broadcaster=None) -> User:
        username = data["username"].strip().lower()
        if User.objects.filter(username__iexact=username).exists():
            raise ValidationFailed(
                "Username already exists",
                errors=[{"field": "username", "message": "Username already exists"}],
            )

        user = User.objects.create_user(
            username=username,
            pin=data["pin"],
            full_name=data["full_name"],
            role=data["role"],
            created_by=created_by,
        )
        logger.info(f"Staff {user.username} ({user.role}) created by {created_by.username}")

        (broadcaster or default_broadcaster).to_room(
            rooms.OWNER,
            "staff-created",
            {"userId": user.id, "username": user.username, "fullName": user.full_name, "role": user.role},
        )
        return user

    @staticmethod
    def update_staff(user_id, data: dict, broadcaster=None) -> User:
        with transaction.atomic():
            user = User.objects.select_for_update().get(pk=UserService.get_staff(user_id).pk)

            username = data.get("username")
            if username and username.strip().lower() != user.username:
                username = username.strip().lower()
                if User.objects.filter(username__iexact=username).exclude(pk=user.pk).exists():
                    raise ValidationFailed(
                        "Username already exists",
                        errors=[{"field": "username", "message": "Username already exists"}],
                    )
                user.username = username

            for field in STAFF_FIELDS:
                if field in data:
                    setattr(user, field, data[field])
            user.save()

        (broadcaster or default_broadcaster).to_user(
            user.id,
            "account-updated",
            {"message": "Your account has been updated", "user": {
                "id": user.id,
                "username": user.username,
                "fullName": user.full_name,
                "role": user.role,
                "active": user.is_active,
            }},
        )
        return user

    @staticmethod
    def reset_pin(user_id, new_pin: str) -> User:
        user = UserService.get_staff(user_id)
        try:
            validate_pin_format(new_pin)
        except DjangoValidationError:
            raise ValidationFailed(
                "PIN must be exactly 4 digits",
                errors=[{"field": "pin", "message": "PIN must be exactly 4 digits"}],
            )
        user.set_pin(new_pin)
        logger.info(f"PIN reset for {user.username}")
        return user

    @staticmethod
    def deactivate_staff(user_id, acting_user: User, broadcaster=None) -> User:
        user = UserService.get_staff(user_id)
        if user.pk == acting_user.pk:
            raise Forbidden("You cannot delete your own account")

        user.is_active = False
        user.save(update_fields=["is_active", "updated_at"])
        logger.warning(f"Staff {user.username} deactivated by {acting_user.username}")

        (broadcaster or default_broadcaster).to_user(
            user.id,
            "account-deactivated",
            {"message": "Your account has been deactivated"},
        )
        return user

    # --- performance ------------------------------------------------------

    @staticmethod
    def performance_for(user: User, since=None) -> dict:
        """Order counts and revenue for a waitress, optionally since a datetime."""
        from orders.models import Order

        orders = Order.objects.filter(waitress=user)
        if since is not None:
            orders = orders.filter(created_at__gte=since)

        stats = orders.aggregate(
            total_orders=Count("id"),
            completed_orders=Count("id", filter=Q(status=Order.Status.COMPLETED)),
            cancelled_orders=Count("id", filter=Q(status=Order.Status.CANCELLED)),
            revenue=Sum("grand_total", filter=Q(status=Order.Status.COMPLETED)),
        )
        stats["revenue"] = stats["revenue"] or Decimal("0.00")
        return stats

    @staticmethod
    def list_staff_with_performance():
        """All staff; waitresses carry today's performance numbers."""
        start_of_day = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
        staff = []
        for user in User.objects.all().order_by("role", "full_name"):
            performance = None
            if user.role == User.Role.WAITRESS:
                performance = UserService.performance_for(user, since=start_of_day)
            staff.append((user, performance))
        return staff
