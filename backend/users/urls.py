from django.urls import path

from .views import CurrentUserView, LogoutView, POSLoginView

app_name = "users"

urlpatterns = [
    path("login/", POSLoginView.as_view(), name="login"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("me/", CurrentUserView.as_view(), name="me"),
]
