# apps/board/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from apps.core.permissions import BoardPermissions

logger = logging.getLogger(__name__)

# Mutation events a client emits after a successful REST call; the server
# relays them to the other connections of the board
RELAYED_EVENTS = frozenset({
    'task-created',
    'task-updated',
    'task-deleted',
    'task-moved',
    'list-created',
    'list-updated',
    'list-deleted',
    'user-assigned',
    'activity-logged',
    'comment-added',
})


def board_group_name(board_id):
    return f'board_{board_id}'


class BoardConsumer(AsyncWebsocketConsumer):
    """
    Realtime board synchronization over one websocket

    Connection states:
    - unauthenticated: only ping and authenticate are accepted
    - authenticated: may join/leave any number of boards it is a member of
      and relay mutation events to them

    Frames are JSON {"type": <event>, "data": {...}}; failures are answered
    with {"type": "error", "message": ...} and the socket stays open.
    """

    def __init__(self, *args, presence=None, **kwargs):
        """presence: the process-wide PresenceRegistry, passed through as_asgi()"""
        super().__init__(*args, **kwargs)
        self.presence = presence
        self.user_id = None
        self.boards = set()

    async def connect(self):
        """Accepts every socket; identity is bound by the authenticate event"""
        self.user = self.scope.get('user')
        await self.accept()
        logger.info(f"✅ WebSocket connected - {getattr(self.user, 'username', 'anonymous')}")

    async def disconnect(self, close_code):
        """Leaves every board group and drops the presence entry; no leave broadcast"""
        for board_id in list(self.boards):
            await self.channel_layer.group_discard(board_group_name(board_id), self.channel_name)
        self.boards.clear()

        if self.user_id is not None:
            await self.presence.remove(self.user_id, self.channel_name)

        logger.info(f"🔌 WebSocket disconnected - user {self.user_id} (code {close_code})")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Dispatches one client frame
        """
        try:
            message = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.warning(f"❌ Invalid JSON received from user {self.user_id}")
            await self.send_error('Malformed message')
            return

        if not isinstance(message, dict) or not isinstance(message.get('data', {}), dict):
            await self.send_error('Malformed message')
            return

        event_type = message.get('type')
        data = message.get('data') or {}

        if event_type == 'ping':
            await self.send_event('pong', {})
        elif event_type == 'authenticate':
            await self.authenticate(data)
        elif self.user_id is None and (event_type in RELAYED_EVENTS or event_type in ('join-board', 'leave-board')):
            await self.send_error('Not authenticated')
        elif event_type == 'join-board':
            await self.join_board(data)
        elif event_type == 'leave-board':
            await self.leave_board(data)
        elif event_type in RELAYED_EVENTS:
            await self.relay(event_type, data)
        else:
            await self.send_error(f'Unknown event type: {event_type}')

    # === Client events ===

    async def authenticate(self, data):
        """Binds the connection to the token's user; safe to repeat"""
        if self.user is None or not self.user.is_authenticated:
            await self.send_error('Invalid or missing token')
            return

        claimed = data.get('userId')
        if claimed is not None and str(claimed) != str(self.user.id):
            logger.warning(f"🚫 {self.user.username} tried to authenticate as user {claimed}")
            await self.send_error('User mismatch')
            return

        self.user_id = self.user.id
        await self.presence.add(self.user_id, self.channel_name)
        await self.send_event('authenticated', {'userId': self.user_id})

    async def join_board(self, data):
        board_id = self.parse_board_id(data)
        if board_id is None:
            await self.send_error('boardId is required')
            return

        if not await self.is_member(board_id):
            logger.warning(f"🚫 User {self.user_id} denied joining board {board_id}")
            await self.send_error('Access denied')
            return

        await self.channel_layer.group_add(board_group_name(board_id), self.channel_name)
        self.boards.add(board_id)
        await self.send_event('joined-board', {'boardId': board_id})
        logger.info(f"📋 User {self.user_id} joined board {board_id}")

    async def leave_board(self, data):
        board_id = self.parse_board_id(data)
        if board_id is None:
            await self.send_error('boardId is required')
            return

        await self.channel_layer.group_discard(board_group_name(board_id), self.channel_name)
        self.boards.discard(board_id)
        await self.send_event('left-board', {'boardId': board_id})

    async def relay(self, event_type, data):
        """Forwards a mutation event to every other connection of the board"""
        board_id = self.parse_board_id(data)
        if board_id is None:
            await self.send_error('boardId is required')
            return

        if not await self.is_member(board_id):
            logger.warning(f"🚫 User {self.user_id} is no longer a member of board {board_id}")
            await self.send_error('Access denied')
            return

        await self.channel_layer.group_send(
            board_group_name(board_id),
            {
                'type': 'board_event',
                'event': event_type,
                'data': data,
                'sender': self.channel_name,
            }
        )

    # === Group handlers ===

    async def board_event(self, event):
        """Delivers a relayed event, skipping the connection that sent it"""
        if event['sender'] == self.channel_name:
            return
        await self.send_event(event['event'], event['data'])

    # === Helpers ===

    async def send_event(self, event_type, data):
        await self.send(text_data=json.dumps({'type': event_type, 'data': data}))

    async def send_error(self, message):
        await self.send(text_data=json.dumps({'type': 'error', 'message': message}))

    def parse_board_id(self, data):
        try:
            return int(data.get('boardId'))
        except (TypeError, ValueError):
            return None

    @database_sync_to_async
    def is_member(self, board_id):
        """Membership is read from the database on every call"""
        return BoardPermissions.can_access(board_id, self.user_id)
