import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.responses import success_response

from .models import User
from .permissions import HasCapability
from .serializers import (
    PerformanceSerializer,
    POSLoginSerializer,
    ResetPinSerializer,
    StaffCreateSerializer,
    StaffSerializer,
    StaffUpdateSerializer,
    UserSerializer,
)
from .services import UserService

logger = logging.getLogger(__name__)


def set_auth_cookie(response, access_token):
    jwt_settings = settings.SIMPLE_JWT
    response.set_cookie(
        key=jwt_settings["AUTH_COOKIE"],
        value=access_token,
        max_age=int(jwt_settings["ACCESS_TOKEN_LIFETIME"].total_seconds()),
        path=jwt_settings.get("AUTH_COOKIE_PATH", "/"),
        httponly=jwt_settings.get("AUTH_COOKIE_HTTP_ONLY", True),
        secure=jwt_settings.get("AUTH_COOKIE_SECURE", False),
        samesite=jwt_settings.get("AUTH_COOKIE_SAMESITE", "Lax"),
    )


@method_decorator(
    ratelimit(key="ip", rate="5/m", method="POST", block=True), name="post"
)
class POSLoginView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = POSLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService.authenticate_pos_user(**serializer.validated_data)

        if not user:
            return Response(
                {"success": False, "message": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        tokens = UserService.generate_tokens_for_user(user)
        response = success_response(
            {"token": tokens["access"], "refresh": tokens["refresh"], "user": UserSerializer(user).data},
            message="Login successful",
        )
        set_auth_cookie(response, tokens["access"])
        logger.info(f"User {user.username} logged in")
        return response


class CurrentUserView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return success_response({"user": UserSerializer(request.user).data})


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        response = success_response(message="Logged out successfully")
        response.delete_cookie(settings.SIMPLE_JWT["AUTH_COOKIE"])
        return response


class StaffViewSet(viewsets.GenericViewSet):
    """
    Owner-only staff management. Deleting a staff member deactivates the
    account; the row is kept because orders reference it.
    """

    queryset = User.objects.all()
    serializer_class = StaffSerializer
    permission_classes = [permissions.IsAuthenticated, HasCapability]
    capability = "staff.manage"

    def list(self, request):
        staff = []
        for user, performance in UserService.list_staff_with_performance():
            entry = StaffSerializer(user).data
            entry["today"] = PerformanceSerializer(performance).data if performance else None
            staff.append(entry)
        return success_response(staff, count=len(staff))

    def retrieve(self, request, pk=None):
        user = UserService.get_staff(pk)
        data = StaffSerializer(user).data
        if user.role == User.Role.WAITRESS:
            data["performance"] = PerformanceSerializer(UserService.performance_for(user)).data
        return success_response(data)

    def create(self, request):
        serializer = StaffCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService.create_staff(serializer.validated_data, created_by=request.user)
        return success_response(
            StaffSerializer(user).data,
            message="Staff member created successfully",
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):
        serializer = StaffUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService.update_staff(pk, serializer.validated_data)
        return success_response(StaffSerializer(user).data, message="Staff member updated successfully")

    def destroy(self, request, pk=None):
        UserService.deactivate_staff(pk, acting_user=request.user)
        return success_response(message="Staff member deactivated successfully")

    @action(detail=True, methods=["post"], url_path="reset-pin")
    def reset_pin(self, request, pk=None):
        serializer = ResetPinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        UserService.reset_pin(pk, serializer.validated_data["pin"])
        return success_response(message="PIN reset successfully")
