# config/asgi.py

import os

from django.core.asgi import get_asgi_application

# Configure Django settings
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

# Load Django before importing anything that touches models
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402

from apps.board.presence import PresenceRegistry  # noqa: E402
from apps.board.routing import build_websocket_urlpatterns  # noqa: E402
from apps.core.middleware import JWTAuthMiddleware  # noqa: E402

# One registry per process, shared by every websocket connection
presence = PresenceRegistry()

# ASGI configuration
application = ProtocolTypeRouter({
    # Plain HTTP (REST API, admin)
    "http": django_asgi_app,

    # WebSocket authenticated with the JWT access token
    "websocket": JWTAuthMiddleware(
        URLRouter(build_websocket_urlpatterns(presence))
    ),
})
