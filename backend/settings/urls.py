from django.urls import include, path
from rest_framework import routers

from .views import RestaurantSettingsViewSet

app_name = "settings"

router = routers.SimpleRouter()
router.register(r"", RestaurantSettingsViewSet, basename="settings")

urlpatterns = [
    path("", include(router.urls)),
]
