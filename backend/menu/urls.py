from django.urls import include, path
from rest_framework import routers

from .views import AddonViewSet, CategoryViewSet, MenuItemViewSet

app_name = "menu"

router = routers.SimpleRouter()
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"addons", AddonViewSet, basename="addon")
router.register(r"items", MenuItemViewSet, basename="menu-item")

urlpatterns = [
    path("", include(router.urls)),
]
