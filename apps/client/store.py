# apps/client/store.py

import logging

logger = logging.getLogger(__name__)

_MISSING = object()


def _key(value):
    """Entity ids arrive as ints from the API and sometimes as strings from peers"""
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def _order(record):
    return (record.get('position', 0), _key(record.get('id')))


class BoardStore:
    """
    Local mirror of the board a client is looking at

    Records are plain dicts keyed by id, shaped like the REST responses
    (snake_case fields). Every mutation replaces the stored dict instead of
    editing it in place. The optimistic journal keeps the previous values of
    the fields each primitive touched, so a rollback leaves changes made by
    peers in the meantime alone.

    Usage:
        store = BoardStore(board_id=3)
        store.load_board(api.get('/api/boards/3/'))
        store.optimistic(
            lambda s: s.move_task(7, list_id=2, position=0),
            lambda: api.put('/api/tasks/7/', {'listId': 2, 'position': 0}),
        )
        store.apply_event('task-moved', frame['data'])
    """

    def __init__(self, board_id=None):
        self.board_id = _key(board_id) if board_id is not None else None
        self.boards = {}
        self.lists = {}
        self.tasks = {}
        self.members = {}
        self._listeners = []
        self._journal = None

    # === Loading ===

    def load_board(self, detail):
        """
        Replaces the current board with a GET /api/boards/<id>/ response
        ({'board': ..., 'lists': [...], 'tasks': [...]})
        """
        board = detail['board']
        self.board_id = _key(board['id'])
        self.boards[self.board_id] = dict(board)
        self.lists = {_key(item['id']): dict(item) for item in detail.get('lists', [])}
        self.tasks = {_key(item['id']): dict(item) for item in detail.get('tasks', [])}
        self._notify('load', board)

    def set_members(self, members):
        self.members = {_key(item['user_id']): dict(item) for item in members}
        self._notify('members', members)

    def clear(self):
        self.board_id = None
        self.boards = {}
        self.lists = {}
        self.tasks = {}
        self.members = {}
        self._notify('clear', None)

    # === Primitives ===

    def add_board(self, board):
        self._put(self.boards, board)

    def update_board(self, board_id, updates):
        self._merge(self.boards, board_id, updates)

    def delete_board(self, board_id):
        self._remove(self.boards, board_id)

    def add_member(self, member):
        self._put(self.members, member, key=member['user_id'])

    def delete_member(self, user_id):
        self._remove(self.members, user_id)

    def add_list(self, task_list):
        self._put(self.lists, task_list)

    def update_list(self, list_id, updates):
        self._merge(self.lists, list_id, updates)

    def delete_list(self, list_id):
        """Drops the list and every task inside it"""
        list_id = _key(list_id)
        for task_id in [k for k, task in self.tasks.items() if _key(task.get('list_id')) == list_id]:
            self._remove(self.tasks, task_id)
        self._remove(self.lists, list_id)

    def add_task(self, task):
        self._put(self.tasks, task)

    def update_task(self, task_id, updates):
        self._merge(self.tasks, task_id, updates)

    def move_task(self, task_id, list_id, position):
        self._merge(self.tasks, task_id, {'list_id': _key(list_id), 'position': position})

    def delete_task(self, task_id):
        self._remove(self.tasks, task_id)

    upsert_board = add_board
    upsert_list = add_list
    upsert_task = add_task

    # === Optimistic updates ===

    def optimistic(self, mutation, request):
        """
        Applies mutation(store) right away, then calls request()

        When request raises, every primitive the mutation performed is undone
        in reverse order and the exception propagates. Returns whatever
        request returned.
        """
        if self._journal is not None:
            raise RuntimeError('Optimistic mutations cannot be nested')

        self._journal = []
        try:
            mutation(self)
        except Exception:
            journal, self._journal = self._journal, None
            self._revert(journal)
            raise
        journal, self._journal = self._journal, None

        try:
            return request()
        except Exception as e:
            logger.info(f"↩️ Reverting {len(journal)} optimistic change(s): {e}")
            self._revert(journal)
            raise

    def _revert(self, journal):
        for collection, key, previous, fields in reversed(journal):
            if fields is None:
                # Whole record: undo an insert or a delete
                if previous is _MISSING:
                    collection.pop(key, None)
                else:
                    collection[key] = previous
                continue

            current = collection.get(key)
            if current is None:
                # Deleted by a peer while the request was in flight
                continue
            restored = dict(current)
            for field, value in fields.items():
                if value is _MISSING:
                    restored.pop(field, None)
                else:
                    restored[field] = value
            collection[key] = restored
        self._notify('revert', None)

    # === Realtime events ===

    def apply_event(self, event_type, payload):
        """
        Applies a relayed websocket event; returns False when it was ignored

        Payloads are the entity the sender got back from the API plus its
        boardId. Applying the same event twice leaves the store unchanged.
        """
        payload = dict(payload or {})
        board_id = payload.pop('boardId', None)
        if board_id is None:
            board_id = payload.get('board_id')

        if self.board_id is not None and board_id is not None and _key(board_id) != self.board_id:
            logger.debug(f"Ignoring {event_type} for board {board_id}")
            return False

        handler = self._event_handlers.get(event_type)
        if handler is None:
            logger.debug(f"Ignoring unknown event {event_type}")
            return False

        if handler(self, payload) is False:
            logger.debug(f"Ignoring {event_type} without an entity id")
            return False
        return True

    def apply_frame(self, frame):
        """Convenience for a raw {"type", "data"} websocket frame"""
        return self.apply_event(frame.get('type'), frame.get('data'))

    def _on_task_created(self, payload):
        task_id = self._entity_id(payload, 'taskId')
        if task_id is None:
            return False
        self.add_task({**payload, 'id': task_id})

    def _on_task_updated(self, payload):
        task_id = self._entity_id(payload, 'taskId')
        if task_id is None:
            return False
        self.update_task(task_id, payload)

    def _on_task_moved(self, payload):
        task_id = self._entity_id(payload, 'taskId')
        if task_id is None:
            return False
        list_id = payload.get('list_id', payload.get('listId'))
        self.move_task(task_id, list_id, payload.get('position', 0))

    def _on_task_deleted(self, payload):
        task_id = self._entity_id(payload, 'taskId')
        if task_id is None:
            return False
        self.delete_task(task_id)

    def _on_list_created(self, payload):
        list_id = self._entity_id(payload, 'listId')
        if list_id is None:
            return False
        self.add_list({**payload, 'id': list_id})

    def _on_list_updated(self, payload):
        list_id = self._entity_id(payload, 'listId')
        if list_id is None:
            return False
        self.update_list(list_id, payload)

    def _on_list_deleted(self, payload):
        list_id = self._entity_id(payload, 'listId')
        if list_id is None:
            return False
        self.delete_list(list_id)

    def _on_user_assigned(self, payload):
        # Carries the task with its refreshed assigned_users
        task = payload.get('task', payload)
        task_id = self._entity_id(task, 'taskId')
        if task_id is None:
            return False
        self.update_task(task_id, task)

    def _on_passive(self, payload):
        # Activity and comments are not mirrored; listeners still hear about them
        self._notify('event', payload)

    _event_handlers = {
        'task-created': _on_task_created,
        'task-updated': _on_task_updated,
        'task-moved': _on_task_moved,
        'task-deleted': _on_task_deleted,
        'list-created': _on_list_created,
        'list-updated': _on_list_updated,
        'list-deleted': _on_list_deleted,
        'user-assigned': _on_user_assigned,
        'activity-logged': _on_passive,
        'comment-added': _on_passive,
    }

    @staticmethod
    def _entity_id(payload, alias):
        return payload.get('id', payload.get(alias))

    # === Views ===

    def lists_in_order(self):
        lists = self.lists.values()
        if self.board_id is not None:
            lists = [item for item in lists if _key(item.get('board_id', self.board_id)) == self.board_id]
        return sorted(lists, key=_order)

    def tasks_in_list(self, list_id):
        list_id = _key(list_id)
        return sorted(
            (task for task in self.tasks.values() if _key(task.get('list_id')) == list_id),
            key=_order,
        )

    # === Listeners ===

    def subscribe(self, callback):
        """callback(store, change, payload) runs after each change; returns unsubscribe()"""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, change, payload):
        for callback in list(self._listeners):
            callback(self, change, payload)

    # === Journaled writes ===

    def _record(self, collection, key, fields=None):
        """
        Journals the state a primitive is about to overwrite

        fields=None keeps the whole record (insert, delete); otherwise only
        the previous values of those fields are kept.
        """
        if self._journal is None:
            return
        previous = collection.get(key, _MISSING)
        if fields is None or previous is _MISSING:
            self._journal.append((collection, key, previous, None))
        else:
            self._journal.append((collection, key, previous, {f: previous.get(f, _MISSING) for f in fields}))

    def _put(self, collection, record, key=None):
        key = _key(record['id'] if key is None else key)
        self._record(collection, key)
        collection[key] = dict(record)
        self._notify('put', collection[key])

    def _merge(self, collection, key, updates):
        key = _key(key)
        self._record(collection, key, fields=updates)
        current = collection.get(key, {'id': key})
        collection[key] = {**current, **updates}
        self._notify('update', collection[key])

    def _remove(self, collection, key):
        key = _key(key)
        if key not in collection:
            return
        self._record(collection, key)
        removed = collection.pop(key)
        self._notify('remove', removed)
