from django.urls import include, path
from rest_framework import routers

from .views import AnalyticsViewSet

app_name = "reports"

router = routers.SimpleRouter()
router.register(r"", AnalyticsViewSet, basename="analytics")

urlpatterns = [
    path("", include(router.urls)),
]
