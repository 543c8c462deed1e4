import pytest
from rest_framework.test import APIClient

from apps.board.services import board_service
from apps.core.auth_service import auth_service
from apps.core.models import User


def make_user(username, password='secret123', **extra):
    return User.objects.create_user(
        username=username,
        email=extra.pop('email', f'{username}@example.com'),
        password=password,
        **extra,
    )


def auth_client(user):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {auth_service.issue_token(user)}')
    return client


@pytest.fixture
def owner(db):
    return make_user('alice', first_name='Alice', last_name='Smith')


@pytest.fixture
def other(db):
    return make_user('bob')


@pytest.fixture
def board(owner):
    return board_service.create_board(owner, 'Sprint 1', 'First sprint')


@pytest.fixture
def todo(owner, board):
    return board_service.create_list(owner, board.id, 'Todo')


@pytest.fixture
def done(owner, board, todo):
    return board_service.create_list(owner, board.id, 'Done')


@pytest.fixture
def owner_client(owner):
    return auth_client(owner)


@pytest.fixture
def other_client(other):
    return auth_client(other)
