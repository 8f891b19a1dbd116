from django.urls import include, path
from rest_framework import routers

from .views import StaffViewSet

app_name = "staff"

router = routers.SimpleRouter()
router.register(r"", StaffViewSet, basename="staff")

urlpatterns = [
    path("", include(router.urls)),
]
