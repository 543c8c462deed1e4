# apps/core/permissions.py

import logging

from .exceptions import AuthorizationError, NotFoundError
from .models import Board, BoardMember, Label, Task, TaskList

logger = logging.getLogger(__name__)


class BoardPermissions:
    """
    Board access rules

    - Any BoardMember may read the board and mutate its lists, tasks,
      labels and comments
    - Only the owner may rename/delete the board or invite members

    Every check reads the database at call time: a revoked membership
    applies to the very next request.
    """

    @staticmethod
    def can_access(board_id, user_id):
        """True iff (board, user) has a BoardMember row"""
        return BoardMember.objects.filter(board_id=board_id, user_id=user_id).exists()

    @staticmethod
    def is_owner(board_id, user_id):
        """True iff the user owns the board"""
        return Board.objects.filter(id=board_id, owner_id=user_id).exists()

    # === Raising helpers (existence first, then membership) ===

    @staticmethod
    def _require_member(board_id, user):
        if not BoardPermissions.can_access(board_id, user.id):
            logger.warning(f"🚫 {user.username} is not a member of board {board_id}")
            raise AuthorizationError('Access denied')

    @staticmethod
    def get_board_for_member(board_id, user):
        try:
            board = Board.objects.get(id=board_id)
        except Board.DoesNotExist:
            raise NotFoundError('Board not found')
        BoardPermissions._require_member(board.id, user)
        return board

    @staticmethod
    def get_board_for_owner(board_id, user):
        try:
            board = Board.objects.get(id=board_id)
        except Board.DoesNotExist:
            raise NotFoundError('Board not found')
        if board.owner_id != user.id:
            logger.warning(f"🚫 {user.username} is not the owner of board {board_id}")
            raise AuthorizationError('Only the board owner can do this')
        return board

    @staticmethod
    def get_list_for_member(list_id, user):
        try:
            task_list = TaskList.objects.select_related('board').get(id=list_id)
        except TaskList.DoesNotExist:
            raise NotFoundError('List not found')
        BoardPermissions._require_member(task_list.board_id, user)
        return task_list

    @staticmethod
    def get_task_for_member(task_id, user):
        """Resolves Task -> List -> Board before checking membership"""
        try:
            task = Task.objects.select_related('list', 'board').get(id=task_id)
        except Task.DoesNotExist:
            raise NotFoundError('Task not found')
        BoardPermissions._require_member(task.list.board_id, user)
        return task

    @staticmethod
    def get_label_for_member(label_id, user):
        try:
            label = Label.objects.select_related('board').get(id=label_id)
        except Label.DoesNotExist:
            raise NotFoundError('Label not found')
        BoardPermissions._require_member(label.board_id, user)
        return label
