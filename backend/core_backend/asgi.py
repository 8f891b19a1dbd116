import os

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core_backend.settings")

# Set up Django before any models are imported by the routing modules
django.setup()

from channels.routing import ProtocolTypeRouter, URLRouter
from django.core.asgi import get_asgi_application

import notifications.routing
from core_backend.jwt_websocket_middleware import JWTAuthMiddleware

django_asgi_app = get_asgi_application()

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        "websocket": JWTAuthMiddleware(URLRouter(notifications.routing.websocket_urlpatterns)),
    }
)
