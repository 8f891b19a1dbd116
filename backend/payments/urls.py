from django.urls import include, path
from rest_framework import routers

from .views import PaymentViewSet

app_name = "payments"

router = routers.SimpleRouter()
router.register(r"", PaymentViewSet, basename="payment")

urlpatterns = [
    path("", include(router.urls)),
]
