from unittest import mock

import pytest
from django.db import DatabaseError, transaction

from apps.activity.utils import log_activity
from apps.board.services import board_service
from apps.core.exceptions import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError
)
from apps.core.models import (
    ActivityLog, Board, BoardMember, Comment, Label, Task, TaskAssignment,
    TaskLabel, TaskList
)

from .conftest import make_user

pytestmark = pytest.mark.django_db


# === Boards ===

def test_board_is_listed_only_for_members(owner, other, board):
    boards, total = board_service.list_boards(owner)
    assert [b.id for b in boards] == [board.id]
    assert total == 1
    assert board.owner_id == owner.id

    assert board_service.list_boards(other) == ([], 0)


def test_list_boards_search_and_paging(owner):
    for name in ('Alpha', 'Beta', 'Alphabet'):
        board_service.create_board(owner, name)

    found, total = board_service.list_boards(owner, search='alpha')
    assert total == 2
    assert {b.name for b in found} == {'Alpha', 'Alphabet'}

    page, total = board_service.list_boards(owner, offset=2, limit=2)
    assert total == 3
    assert [b.name for b in page] == ['Alpha']


def test_create_board_requires_a_name(owner):
    with pytest.raises(ValidationError):
        board_service.create_board(owner, '   ')
    assert not Board.objects.exists()


def test_board_detail_hides_archived_tasks(owner, board, todo):
    kept = board_service.create_task(owner, todo.id, 'kept')
    hidden = board_service.create_task(owner, todo.id, 'hidden')
    board_service.update_task(owner, hidden.id, archived=True)

    _, lists, tasks = board_service.get_board_detail(owner, board.id)
    assert [l.id for l in lists] == [todo.id]
    assert [t.id for t in tasks] == [kept.id]


def test_invite_member_by_email(owner, other, board):
    member = board_service.add_member(owner, board.id, 'BOB@example.com')
    assert member.role == BoardMember.ROLE_MEMBER
    assert member.user_id == other.id

    board_detail, _, _ = board_service.get_board_detail(other, board.id)
    assert board_detail.id == board.id


def test_invite_errors(owner, other, board):
    with pytest.raises(NotFoundError):
        board_service.add_member(owner, board.id, 'nobody@example.com')

    board_service.add_member(owner, board.id, other.email)
    with pytest.raises(ConflictError):
        board_service.add_member(owner, board.id, other.email)
    assert BoardMember.objects.filter(board=board).count() == 2


def test_delete_board_cascades(owner, board, todo, done):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    label = board_service.create_label(owner, board.id, 'bug')
    board_service.add_label_to_task(owner, task.id, label.id)
    board_service.add_comment(owner, task.id, 'looks good')

    board_service.delete_board(owner, board.id)

    assert not TaskList.objects.filter(board_id=board.id).exists()
    assert not Task.objects.filter(board_id=board.id).exists()
    assert not BoardMember.objects.filter(board_id=board.id).exists()
    assert not Label.objects.filter(board_id=board.id).exists()
    assert not Comment.objects.exists()
    # The audit trail outlives the board
    assert ActivityLog.objects.filter(board_id=board.id, action='delete', entity_type='board').exists()


# === Lists ===

def test_delete_list_removes_its_tasks(owner, board, todo, done):
    gone = board_service.create_task(owner, todo.id, 'gone')
    stays = board_service.create_task(owner, done.id, 'stays')

    board_service.delete_list(owner, todo.id)

    assert not Task.objects.filter(id=gone.id).exists()
    assert Task.objects.filter(id=stays.id).exists()


def test_update_list_position_is_assigned_as_given(owner, board, todo, done):
    board_service.update_list(owner, done.id, position=0)
    _, lists, _ = board_service.get_board_detail(owner, board.id)
    # Both at 0, tie broken by id
    assert [l.id for l in lists] == [todo.id, done.id]


# === Tasks ===

def test_create_task_defaults(owner, board, todo):
    task = board_service.create_task(owner, todo.id, '  Write docs  ')
    assert task.title == 'Write docs'
    assert task.board_id == board.id
    assert task.priority == Task.PRIORITY_MEDIUM
    assert task.created_by_id == owner.id
    assert task.archived is False


def test_unknown_priority_is_coerced_to_medium(owner, todo):
    task = board_service.create_task(owner, todo.id, 'urgent?', priority='urgent')
    assert task.priority == Task.PRIORITY_MEDIUM

    task = board_service.update_task(owner, task.id, priority='high')
    assert task.priority == Task.PRIORITY_HIGH


def test_create_task_rejects_mismatched_board(owner, todo):
    other_board = board_service.create_board(owner, 'Other')
    with pytest.raises(ValidationError):
        board_service.create_task(owner, todo.id, 'lost', board_id=other_board.id)


def test_move_task_between_lists(owner, board, todo, done):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    board_service.create_task(owner, done.id, 'Already done')

    moved = board_service.move_task(owner, task.id, done.id, 0)

    assert moved.list_id == done.id
    assert moved.position == 0
    assert moved.board_id == board.id
    entry = ActivityLog.objects.filter(entity_type='task', entity_id=task.id, action='update').latest('id')
    assert entry.changes == {'list_id': done.id, 'position': 0}


def test_move_without_position_appends(owner, todo, done):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    board_service.create_task(owner, done.id, 'one')
    board_service.create_task(owner, done.id, 'two')

    moved = board_service.update_task(owner, task.id, list_id=done.id)
    assert moved.position == 2


def test_cross_board_move_is_rejected(owner, board, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    other_board = board_service.create_board(owner, 'Other')
    foreign = board_service.create_list(owner, other_board.id, 'Foreign')

    with pytest.raises(ValidationError):
        board_service.move_task(owner, task.id, foreign.id, 0)

    task.refresh_from_db()
    assert task.list_id == todo.id
    assert task.board_id == task.list.board_id == board.id


def test_move_to_missing_list(owner, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    with pytest.raises(NotFoundError):
        board_service.move_task(owner, task.id, 999, 0)


def test_update_task_rejects_unknown_fields(owner, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    with pytest.raises(ValidationError):
        board_service.update_task(owner, task.id, board_id=123)


# === Assignments ===

def test_assign_enrolls_non_member_then_rejects_duplicate(owner, other, board, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    assert not BoardMember.objects.filter(board=board, user=other).exists()

    assignment = board_service.assign_user(owner, task.id, other.id)
    assert assignment.user_id == other.id
    assert BoardMember.objects.get(board=board, user=other).role == BoardMember.ROLE_MEMBER

    with pytest.raises(ConflictError):
        board_service.assign_user(owner, task.id, other.id)
    assert TaskAssignment.objects.filter(task=task, user=other).count() == 1

    entry = ActivityLog.objects.get(action=ActivityLog.ACTION_ASSIGN)
    assert entry.changes == {'assignedUserId': other.id, 'enrolled': True}


def test_assign_unknown_user(owner, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    with pytest.raises(NotFoundError):
        board_service.assign_user(owner, task.id, 999)


def test_unassign(owner, other, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    assignment = board_service.assign_user(owner, task.id, other.id)

    board_service.unassign_user(owner, task.id, assignment.id)
    assert not TaskAssignment.objects.exists()

    with pytest.raises(NotFoundError):
        board_service.unassign_user(owner, task.id, assignment.id)


def test_task_carries_assignees_and_labels(owner, other, board, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    board_service.assign_user(owner, task.id, other.id)
    label = board_service.create_label(owner, board.id, 'bug', '#EF4444')
    board_service.add_label_to_task(owner, task.id, label.id)

    task = board_service.get_task(owner, task.id)
    assert [a.user_id for a in task.assignments.all()] == [other.id]
    assert [l.name for l in task.labels.all()] == ['bug']


# === Labels ===

def test_label_lifecycle(owner, board, todo):
    label = board_service.create_label(owner, board.id, 'bug')
    assert label.color == '#6B7280'

    label = board_service.update_label(owner, label.id, color='#10B981')
    assert label.color == '#10B981'
    assert [l.id for l in board_service.list_labels(owner, board.id)] == [label.id]

    board_service.delete_label(owner, label.id)
    assert not Label.objects.exists()


def test_duplicate_label_on_task_is_rejected(owner, board, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    label = board_service.create_label(owner, board.id, 'bug')

    board_service.add_label_to_task(owner, task.id, label.id)
    with pytest.raises(ConflictError):
        board_service.add_label_to_task(owner, task.id, label.id)
    assert TaskLabel.objects.filter(task=task).count() == 1


def test_label_of_another_board_cannot_be_attached(owner, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    other_board = board_service.create_board(owner, 'Other')
    foreign = board_service.create_label(owner, other_board.id, 'foreign')

    with pytest.raises(NotFoundError):
        board_service.add_label_to_task(owner, task.id, foreign.id)


def test_remove_label_from_task(owner, board, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    label = board_service.create_label(owner, board.id, 'bug')
    board_service.add_label_to_task(owner, task.id, label.id)

    board_service.remove_label_from_task(owner, task.id, label.id)
    assert not TaskLabel.objects.exists()

    with pytest.raises(NotFoundError):
        board_service.remove_label_from_task(owner, task.id, label.id)


# === Comments ===

def test_comments(owner, other, board, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    board_service.add_member(owner, board.id, other.email)

    first = board_service.add_comment(owner, task.id, '  first  ')
    second = board_service.add_comment(other, task.id, 'second')
    assert first.text == 'first'
    assert [c.id for c in board_service.list_comments(owner, task.id)] == [first.id, second.id]

    with pytest.raises(ValidationError):
        board_service.add_comment(owner, task.id, '   ')

    with pytest.raises(AuthorizationError):
        board_service.delete_comment(owner, second.id)

    board_service.delete_comment(other, second.id)
    with pytest.raises(NotFoundError):
        board_service.delete_comment(other, second.id)


# === Activity ===

def test_every_mutation_is_logged(owner, board, todo):
    task = board_service.create_task(owner, todo.id, 'Write docs')
    board_service.update_task(owner, task.id, title='Write the docs')
    board_service.delete_task(owner, task.id)

    activities, total = board_service.list_activities(owner, board.id)
    # board create, list create, task create/update/delete
    assert total == 5
    assert [(a.action, a.entity_type) for a in activities[:3]] == [
        ('delete', 'task'), ('update', 'task'), ('create', 'task'),
    ]
    assert activities[1].changes == {'title': 'Write the docs'}


@pytest.mark.django_db(transaction=True)
def test_log_activity_requires_a_transaction(owner, board):
    with pytest.raises(RuntimeError):
        log_activity(board.id, owner, 'create', 'board', board.id)


def test_failed_log_write_rolls_back_the_mutation(owner, board, todo):
    with mock.patch.object(ActivityLog.objects, 'create', side_effect=DatabaseError('disk full')):
        with pytest.raises(DatabaseError):
            board_service.create_task(owner, todo.id, 'never stored')

    assert not Task.objects.filter(title='never stored').exists()


def test_log_inside_atomic_block(owner, board):
    with transaction.atomic():
        entry = log_activity(board.id, owner, 'update', 'board', board.id, {'name': 'x'})
    assert entry.user_id == owner.id
    assert entry.changes == {'name': 'x'}


def test_activity_pages_newest_first(owner, board):
    for i in range(3):
        board_service.create_list(owner, board.id, f'List {i}')

    page, total = board_service.list_activities(owner, board.id, offset=0, limit=2)
    assert total == 4
    assert [a.changes['name'] for a in page] == ['List 2', 'List 1']


def test_invited_user_appears_in_members(owner, board):
    carol = make_user('carol')
    board_service.add_member(owner, board.id, 'carol@example.com')
    assert board_service.list_members(carol, board.id)[-1].user_id == carol.id
