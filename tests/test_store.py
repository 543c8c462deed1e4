import pytest

from apps.client import BoardStore


class RequestFailed(Exception):
    pass


def _loaded_store():
    store = BoardStore()
    store.load_board({
        'board': {'id': 1, 'name': 'Sprint 1', 'owner_id': 1},
        'lists': [
            {'id': 10, 'board_id': 1, 'name': 'Todo', 'position': 0},
            {'id': 11, 'board_id': 1, 'name': 'Done', 'position': 1},
        ],
        'tasks': [
            {'id': 100, 'board_id': 1, 'list_id': 10, 'title': 'Write docs', 'position': 0},
            {'id': 101, 'board_id': 1, 'list_id': 10, 'title': 'Review', 'position': 1},
            {'id': 102, 'board_id': 1, 'list_id': 11, 'title': 'Kickoff', 'position': 0},
        ],
    })
    return store


def _snapshot(store):
    return (dict(store.boards), dict(store.lists), dict(store.tasks), dict(store.members))


def test_load_board_and_ordered_views():
    store = _loaded_store()
    assert store.board_id == 1
    assert [l['name'] for l in store.lists_in_order()] == ['Todo', 'Done']
    assert [t['id'] for t in store.tasks_in_list(10)] == [100, 101]


def test_ties_are_ordered_by_id():
    store = _loaded_store()
    store.update_task(101, {'position': 0})
    assert [t['id'] for t in store.tasks_in_list(10)] == [100, 101]


def test_task_updated_twice_is_idempotent():
    store = _loaded_store()
    event = {'id': 100, 'title': 'Write the docs', 'priority': 'high', 'boardId': 1}

    store.apply_event('task-updated', event)
    once = _snapshot(store)
    store.apply_event('task-updated', event)

    assert _snapshot(store) == once
    assert store.tasks[100]['title'] == 'Write the docs'
    assert store.tasks[100]['list_id'] == 10


def test_update_of_unknown_id_upserts():
    store = _loaded_store()
    store.apply_event('task-updated', {'id': 200, 'list_id': 11, 'title': 'Late', 'position': 1, 'boardId': 1})
    assert [t['id'] for t in store.tasks_in_list(11)] == [102, 200]


def test_delete_of_unknown_id_is_a_no_op():
    store = _loaded_store()
    before = _snapshot(store)
    store.delete_task(999)
    store.delete_list(999)
    assert _snapshot(store) == before


def test_delete_list_drops_its_tasks():
    store = _loaded_store()
    store.apply_event('list-deleted', {'id': 10, 'boardId': 1})
    assert [l['id'] for l in store.lists_in_order()] == [11]
    assert set(store.tasks) == {102}


def test_task_moved_event():
    store = _loaded_store()
    assert store.apply_event('task-moved', {'id': 100, 'listId': 11, 'position': 0, 'boardId': '1'})
    assert [t['id'] for t in store.tasks_in_list(11)] == [100, 102]
    assert [t['id'] for t in store.tasks_in_list(10)] == [101]


def test_events_of_another_board_are_ignored():
    store = _loaded_store()
    before = _snapshot(store)
    assert store.apply_event('task-deleted', {'id': 100, 'boardId': 2}) is False
    assert _snapshot(store) == before


def test_unknown_events_are_ignored():
    store = _loaded_store()
    assert store.apply_event('board-exploded', {'boardId': 1}) is False


def test_list_and_assignment_events():
    store = _loaded_store()
    store.apply_event('list-created', {'id': 12, 'board_id': 1, 'name': 'Doing', 'position': 2, 'boardId': 1})
    store.apply_event('list-updated', {'id': 12, 'position': 0, 'boardId': 1})
    assert [l['name'] for l in store.lists_in_order()] == ['Todo', 'Doing', 'Done']

    assignees = [{'id': 5, 'user_id': 2, 'username': 'bob'}]
    store.apply_event('user-assigned', {'task': {'id': 100, 'assigned_users': assignees}, 'boardId': 1})
    assert store.tasks[100]['assigned_users'] == assignees


def test_optimistic_move_is_reverted_when_the_request_fails():
    store = _loaded_store()
    before = _snapshot(store)

    def request():
        raise RequestFailed('500')

    with pytest.raises(RequestFailed):
        store.optimistic(lambda s: s.move_task(100, 11, 0), request)

    assert _snapshot(store) == before
    assert store.tasks[100]['list_id'] == 10


def test_optimistic_revert_restores_cascaded_deletes_and_inserts():
    store = _loaded_store()
    before = _snapshot(store)

    def mutation(s):
        s.add_list({'id': 12, 'board_id': 1, 'name': 'Doing', 'position': 2})
        s.delete_list(10)

    def request():
        raise RequestFailed('offline')

    with pytest.raises(RequestFailed):
        store.optimistic(mutation, request)
    assert _snapshot(store) == before


def test_optimistic_keeps_changes_on_success():
    store = _loaded_store()
    result = store.optimistic(lambda s: s.update_task(101, {'title': 'Reviewed'}), lambda: {'ok': True})
    assert result == {'ok': True}
    assert store.tasks[101]['title'] == 'Reviewed'


def test_optimistic_calls_cannot_nest():
    store = _loaded_store()

    def mutation(s):
        s.optimistic(lambda inner: None, lambda: None)

    with pytest.raises(RuntimeError):
        store.optimistic(mutation, lambda: None)


def test_subscribe_and_unsubscribe():
    store = _loaded_store()
    changes = []
    unsubscribe = store.subscribe(lambda s, change, payload: changes.append(change))

    store.add_task({'id': 103, 'list_id': 11, 'title': 'New', 'position': 1})
    store.apply_event('comment-added', {'id': 1, 'boardId': 1})
    unsubscribe()
    store.delete_task(103)

    assert changes == ['put', 'event']


def test_members():
    store = _loaded_store()
    store.set_members([{'id': 1, 'user_id': 1, 'role': 'owner'}])
    store.add_member({'id': 2, 'user_id': 2, 'role': 'member'})
    store.delete_member(1)
    assert list(store.members) == [2]


def test_revert_keeps_peer_changes_made_during_the_request():
    store = _loaded_store()

    def request():
        store.apply_event('task-updated', {'id': 100, 'title': 'Renamed by peer', 'boardId': 1})
        raise RequestFailed('409')

    with pytest.raises(RequestFailed):
        store.optimistic(lambda s: s.move_task(100, 11, 0), request)

    assert store.tasks[100]['title'] == 'Renamed by peer'
    assert store.tasks[100]['list_id'] == 10
    assert store.tasks[100]['position'] == 0


def test_revert_drops_fields_the_mutation_introduced():
    store = _loaded_store()

    with pytest.raises(RequestFailed):
        store.optimistic(lambda s: s.update_task(101, {'priority': 'high'}), _fail)

    assert 'priority' not in store.tasks[101]


def test_revert_skips_records_deleted_by_a_peer():
    store = _loaded_store()

    def request():
        store.apply_event('task-deleted', {'id': 100, 'boardId': 1})
        raise RequestFailed('404')

    with pytest.raises(RequestFailed):
        store.optimistic(lambda s: s.update_task(100, {'title': 'Mine'}), request)

    assert 100 not in store.tasks


def test_created_events_accept_id_aliases():
    store = _loaded_store()
    assert store.apply_event('task-created', {'taskId': 5, 'list_id': 11, 'title': 'x', 'position': 3, 'boardId': 1})
    assert store.apply_event('list-created', {'listId': 13, 'board_id': 1, 'name': 'Later', 'position': 5, 'boardId': 1})

    assert store.tasks[5]['id'] == 5
    assert store.lists[13]['name'] == 'Later'


@pytest.mark.parametrize('event_type', [
    'task-created', 'task-updated', 'task-moved', 'task-deleted',
    'list-created', 'list-updated', 'list-deleted', 'user-assigned',
])
def test_events_without_an_id_are_ignored(event_type):
    store = _loaded_store()
    before = _snapshot(store)

    assert store.apply_event(event_type, {'title': 'x', 'list_id': 10, 'boardId': 1}) is False
    assert _snapshot(store) == before


def _fail():
    raise RequestFailed('500')
