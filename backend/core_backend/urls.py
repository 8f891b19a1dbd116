"""
URL configuration for core_backend project.

Every endpoint lives under ``/api/``; the real-time socket is routed in
``core_backend.asgi``.
"""

from django.http import JsonResponse
from django.urls import include, path


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("api/auth/", include("users.urls")),
    path("api/staff/", include("users.staff_urls")),
    # The orders app registers its own "orders" prefix
    path("api/", include("orders.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/menu/", include("menu.urls")),
    path("api/settings/", include("settings.urls")),
    path("api/analytics/", include("reports.urls")),
]
