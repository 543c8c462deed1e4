# apps/board/routing.py

from django.urls import re_path

from . import consumers


def build_websocket_urlpatterns(presence):
    """
    WebSocket routes of the board app

    The presence registry is owned by the ASGI application and shared by
    every consumer instance.
    """
    return [
        re_path(r'ws/boards/$', consumers.BoardConsumer.as_asgi(presence=presence)),
    ]
