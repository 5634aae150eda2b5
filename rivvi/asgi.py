"""
ASGI config for the rivvi project.

Serves HTTP through Django and the ``ws/updates/`` websocket through
Channels.  Websocket clients authenticate with ``?token=``.  Settings
must be configured before any Django import.
"""
import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "rivvi.settings")

import django  # noqa: E402
django.setup()  # noqa: E402

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from django.core.asgi import get_asgi_application  # noqa: E402
from django.urls import path  # noqa: E402

from outreach.realtime.consumers import UpdatesConsumer  # noqa: E402
from outreach.realtime.middleware import TokenAuthMiddlewareStack  # noqa: E402

django_asgi_app = get_asgi_application()

websocket_urlpatterns = [
    path("ws/updates/", UpdatesConsumer.as_asgi()),
]

application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": TokenAuthMiddlewareStack(URLRouter(websocket_urlpatterns)),
})
