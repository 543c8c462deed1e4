# apps/board/presence.py

import asyncio
import logging
from collections import defaultdict

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """
    Who is connected: user id -> set of channel names

    One instance per ASGI process, created in config/asgi.py and handed to
    every BoardConsumer. All mutations go through an asyncio.Lock so bursts
    of connects and disconnects cannot interleave halfway.
    """

    def __init__(self):
        self._connections = defaultdict(set)
        self._lock = asyncio.Lock()

    async def add(self, user_id, channel_name):
        """Registers a connection; registering it again is a no-op"""
        async with self._lock:
            self._connections[user_id].add(channel_name)
            count = len(self._connections[user_id])
        logger.debug(f"👤 User {user_id} online ({count} connection(s))")

    async def remove(self, user_id, channel_name):
        async with self._lock:
            channels = self._connections.get(user_id)
            if channels is None:
                return
            channels.discard(channel_name)
            if not channels:
                del self._connections[user_id]
        logger.debug(f"👋 Connection {channel_name} of user {user_id} removed")

    async def connections_of(self, user_id):
        async with self._lock:
            return set(self._connections.get(user_id, ()))

    async def is_online(self, user_id):
        async with self._lock:
            return bool(self._connections.get(user_id))

    async def online_users(self):
        async with self._lock:
            return set(self._connections)

    async def clear(self):
        """Drops every registration (process shutdown)"""
        async with self._lock:
            self._connections.clear()
