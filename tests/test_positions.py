import pytest

from apps.board.services import board_service
from apps.core.models import Task
from apps.core.utils import next_list_position, next_position, next_task_position, parse_pagination

pytestmark = pytest.mark.django_db


def test_first_child_gets_position_zero(board, todo):
    assert next_list_position(board.id) == 1
    assert next_task_position(todo.id) == 0
    assert next_position(Task.objects.none()) == 0


def test_next_position_is_one_past_the_highest(owner, board, todo):
    first = board_service.create_task(owner, todo.id, 'first')
    second = board_service.create_task(owner, todo.id, 'second')
    assert (first.position, second.position) == (0, 1)

    # Gaps are not filled
    board_service.update_task(owner, first.id, position=7)
    assert next_task_position(todo.id) == 8
    assert board_service.create_task(owner, todo.id, 'third').position == 8


def test_colliding_positions_are_ordered_by_id(owner, board, todo):
    a = board_service.create_task(owner, todo.id, 'a')
    b = board_service.create_task(owner, todo.id, 'b')
    board_service.update_task(owner, b.id, position=0)

    _, _, tasks = board_service.get_board_detail(owner, board.id)
    assert [t.id for t in tasks] == [a.id, b.id]
    assert [t.position for t in tasks] == [0, 0]


def test_lists_are_appended_in_creation_order(owner, board, todo, done):
    assert (todo.position, done.position) == (0, 1)
    doing = board_service.create_list(owner, board.id, 'Doing')
    assert doing.position == 2


@pytest.mark.parametrize('params, expected', [
    ({}, (1, 10, 0)),
    ({'page': '3', 'limit': '5'}, (3, 5, 10)),
    ({'page': '0', 'limit': '-1'}, (1, 10, 0)),
    ({'page': 'x', 'limit': '1000'}, (1, 100, 0)),
])
def test_parse_pagination(params, expected):
    assert parse_pagination(params) == expected
