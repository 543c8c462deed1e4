# apps/board/services.py

"""
Board mutation service - the only place that changes board data

Every public operation follows the same steps:
1. validate required input
2. check access (BoardPermissions)
3. allocate a position when appending
4. mutate and write one activity log entry in the same transaction
5. return the materialized entity (tasks carry assignments and labels)
"""

import logging
from typing import Dict, Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Prefetch, Q

from apps.activity.utils import log_activity, snapshot
from apps.core.exceptions import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError
)
from apps.core.models import (
    ActivityLog, Board, BoardMember, Comment, Label, Task, TaskAssignment,
    TaskLabel, TaskList, User
)
from apps.core.permissions import BoardPermissions
from apps.core.utils import next_list_position, next_task_position

logger = logging.getLogger(__name__)

PRIORITIES = {Task.PRIORITY_LOW, Task.PRIORITY_MEDIUM, Task.PRIORITY_HIGH}

TASK_UPDATE_FIELDS = ('title', 'description', 'priority', 'due_date', 'archived', 'list_id', 'position')


def task_queryset():
    """Tasks with everything the API renders, in read order"""
    return Task.objects.select_related('list').prefetch_related(
        Prefetch('assignments', queryset=TaskAssignment.objects.select_related('user')),
        'labels',
    )


class BoardService:
    """
    Authoritative create/update/delete/move of boards and their children

    Methods receive the acting user first; authorization and not-found
    failures are raised as the errors of apps.core.exceptions.
    """

    # === Validation helpers ===

    def _require_text(self, value, field: str) -> str:
        if value is None or not str(value).strip():
            raise ValidationError(f'{field} is required')
        return str(value).strip()

    def _coerce_priority(self, value) -> str:
        """Unknown or missing priorities fall back to medium"""
        if value in PRIORITIES:
            return value
        if value not in (None, ''):
            logger.warning(f"⚠️ Invalid priority {value!r} replaced by '{Task.PRIORITY_MEDIUM}'")
        return Task.PRIORITY_MEDIUM

    def _materialize_task(self, task_id: int) -> Task:
        return task_queryset().get(id=task_id)

    # === BOARDS ===

    def create_board(self, user, name: str, description: Optional[str] = None) -> Board:
        name = self._require_text(name, 'Board name')
        with transaction.atomic():
            board = Board.objects.create(name=name, description=description or None, owner=user)
            log_activity(board.id, user, ActivityLog.ACTION_CREATE, 'board', board.id, snapshot(board))
        return board

    def list_boards(self, user, search: str = '', offset: int = 0, limit: int = 10) -> Tuple[list, int]:
        """Boards the user is a member of, newest first"""
        boards = Board.objects.filter(members__user=user)
        if search:
            boards = boards.filter(Q(name__icontains=search) | Q(description__icontains=search))
        boards = boards.distinct().order_by('-created_at', '-id')
        return list(boards[offset:offset + limit]), boards.count()

    def get_board_detail(self, user, board_id: int) -> Tuple[Board, list, list]:
        """Board with its lists and non-archived tasks"""
        board = BoardPermissions.get_board_for_member(board_id, user)
        lists = list(board.lists.order_by('position', 'id'))
        tasks = list(
            task_queryset().filter(board=board, archived=False).order_by('list_id', 'position', 'id')
        )
        return board, lists, tasks

    def update_board(self, user, board_id: int, name=None, description=None) -> Board:
        board = BoardPermissions.get_board_for_owner(board_id, user)
        changes = {}
        if name is not None:
            board.name = changes['name'] = self._require_text(name, 'Board name')
        if description is not None:
            board.description = changes['description'] = description or None

        with transaction.atomic():
            board.save()
            log_activity(board.id, user, ActivityLog.ACTION_UPDATE, 'board', board.id, changes)
        return board

    def delete_board(self, user, board_id: int) -> None:
        """Deletes the board and cascades lists, tasks, members and labels"""
        board = BoardPermissions.get_board_for_owner(board_id, user)
        with transaction.atomic():
            log_activity(board.id, user, ActivityLog.ACTION_DELETE, 'board', board.id, {'name': board.name})
            board.delete()

    def add_member(self, user, board_id: int, email: str) -> BoardMember:
        board = BoardPermissions.get_board_for_owner(board_id, user)
        email = self._require_text(email, 'Email')

        invitee = User.objects.filter(email__iexact=email).first()
        if invitee is None:
            raise NotFoundError('User not found')
        if BoardPermissions.can_access(board.id, invitee.id):
            raise ConflictError('User is already a board member')

        try:
            with transaction.atomic():
                member = BoardMember.objects.create(board=board, user=invitee, role=BoardMember.ROLE_MEMBER)
                log_activity(board.id, user, ActivityLog.ACTION_UPDATE, 'board', board.id,
                             {'action': 'added_member', 'memberId': invitee.id})
        except IntegrityError:
            raise ConflictError('User is already a board member')
        return member

    def list_members(self, user, board_id: int):
        board = BoardPermissions.get_board_for_member(board_id, user)
        return list(board.members.select_related('user').order_by('joined_at', 'id'))

    # === LISTS ===

    def create_list(self, user, board_id: int, name: str) -> TaskList:
        name = self._require_text(name, 'List name')
        board = BoardPermissions.get_board_for_member(board_id, user)
        with transaction.atomic():
            task_list = TaskList.objects.create(
                board=board, name=name, position=next_list_position(board.id)
            )
            log_activity(board.id, user, ActivityLog.ACTION_CREATE, 'list', task_list.id, snapshot(task_list))
        return task_list

    def update_list(self, user, list_id: int, name=None, position=None) -> TaskList:
        """Rename and/or reorder; the position is assigned as given"""
        task_list = BoardPermissions.get_list_for_member(list_id, user)
        changes = {}
        if name is not None:
            task_list.name = changes['name'] = self._require_text(name, 'List name')
        if position is not None:
            task_list.position = changes['position'] = int(position)

        with transaction.atomic():
            task_list.save()
            log_activity(task_list.board_id, user, ActivityLog.ACTION_UPDATE, 'list', task_list.id, changes)
        return task_list

    def delete_list(self, user, list_id: int) -> None:
        """Deletes the list and every task in it"""
        task_list = BoardPermissions.get_list_for_member(list_id, user)
        with transaction.atomic():
            log_activity(task_list.board_id, user, ActivityLog.ACTION_DELETE, 'list', task_list.id,
                         {'name': task_list.name})
            task_list.delete()

    # === TASKS ===

    def create_task(self, user, list_id: int, title: str, description=None,
                    priority=None, due_date=None, board_id=None) -> Task:
        title = self._require_text(title, 'Title')
        task_list = BoardPermissions.get_list_for_member(list_id, user)
        if board_id is not None and int(board_id) != task_list.board_id:
            raise ValidationError('List does not belong to this board')

        with transaction.atomic():
            task = Task.objects.create(
                list=task_list,
                board_id=task_list.board_id,
                title=title,
                description=description or None,
                priority=self._coerce_priority(priority),
                due_date=due_date,
                position=next_task_position(task_list.id),
                created_by=user,
            )
            log_activity(task.board_id, user, ActivityLog.ACTION_CREATE, 'task', task.id, snapshot(task))
        return self._materialize_task(task.id)

    def get_task(self, user, task_id: int) -> Task:
        task = BoardPermissions.get_task_for_member(task_id, user)
        return self._materialize_task(task.id)

    def update_task(self, user, task_id: int, **fields) -> Task:
        """
        Partial update of a task

        Accepted fields: title, description, priority, due_date, archived,
        list_id, position. Changing list_id moves the task; the destination
        must be a list of the same board. Without an explicit position a
        moved task is appended to the destination list.
        """
        unknown = set(fields) - set(TASK_UPDATE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        task = BoardPermissions.get_task_for_member(task_id, user)
        changes: Dict = {}

        if 'title' in fields:
            task.title = changes['title'] = self._require_text(fields['title'], 'Title')
        if 'description' in fields:
            task.description = changes['description'] = fields['description'] or None
        if 'priority' in fields:
            task.priority = changes['priority'] = self._coerce_priority(fields['priority'])
        if 'due_date' in fields:
            task.due_date = changes['due_date'] = fields['due_date']
        if 'archived' in fields:
            task.archived = changes['archived'] = bool(fields['archived'])

        destination_id = fields.get('list_id')
        moving = destination_id is not None and int(destination_id) != task.list_id
        if moving:
            try:
                destination = TaskList.objects.get(id=destination_id)
            except TaskList.DoesNotExist:
                raise NotFoundError('List not found')
            if destination.board_id != task.board_id:
                raise ValidationError('Tasks can only move between lists of the same board')
            task.list = destination
            changes['list_id'] = destination.id

        with transaction.atomic():
            if fields.get('position') is not None:
                task.position = changes['position'] = int(fields['position'])
            elif moving:
                task.position = changes['position'] = next_task_position(task.list_id)
            task.save()
            log_activity(task.board_id, user, ActivityLog.ACTION_UPDATE, 'task', task.id, changes)

        if moving:
            logger.info(f"🔄 Task {task.id} moved to list {task.list_id} at position {task.position}")
        return self._materialize_task(task.id)

    def move_task(self, user, task_id: int, list_id: int, position: int) -> Task:
        """Moves a task to (list_id, position) in one step"""
        return self.update_task(user, task_id, list_id=list_id, position=position)

    def delete_task(self, user, task_id: int) -> None:
        task = BoardPermissions.get_task_for_member(task_id, user)
        with transaction.atomic():
            log_activity(task.board_id, user, ActivityLog.ACTION_DELETE, 'task', task.id,
                         {'title': task.title, 'list_id': task.list_id})
            task.delete()

    # === ASSIGNMENTS ===

    def assign_user(self, user, task_id: int, assignee_id: int) -> TaskAssignment:
        """
        Assigns a user to a task

        A user who is not yet a member of the task's board is enrolled as
        'member' first. Assigning the same user twice is a conflict.
        """
        task = BoardPermissions.get_task_for_member(task_id, user)
        try:
            assignee = User.objects.get(id=assignee_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFoundError('User not found')

        if TaskAssignment.objects.filter(task=task, user=assignee).exists():
            raise ConflictError('User already assigned to this task')

        try:
            with transaction.atomic():
                _, enrolled = BoardMember.objects.get_or_create(
                    board_id=task.board_id,
                    user=assignee,
                    defaults={'role': BoardMember.ROLE_MEMBER},
                )
                if enrolled:
                    logger.info(f"➕ {assignee.username} auto-enrolled in board {task.board_id}")
                assignment = TaskAssignment.objects.create(task=task, user=assignee)
                log_activity(task.board_id, user, ActivityLog.ACTION_ASSIGN, 'task', task.id,
                             {'assignedUserId': assignee.id, 'enrolled': enrolled})
        except IntegrityError:
            raise ConflictError('User already assigned to this task')
        return TaskAssignment.objects.select_related('user').get(id=assignment.id)

    def unassign_user(self, user, task_id: int, assignment_id: int) -> None:
        task = BoardPermissions.get_task_for_member(task_id, user)
        assignment = TaskAssignment.objects.filter(id=assignment_id, task=task).first()
        if assignment is None:
            raise NotFoundError('Assignment not found')

        with transaction.atomic():
            assignment.delete()
            log_activity(task.board_id, user, ActivityLog.ACTION_UPDATE, 'task', task.id,
                         {'removedAssignment': int(assignment_id)})

    # === LABELS ===

    def create_label(self, user, board_id: int, name: str, color: Optional[str] = None) -> Label:
        name = self._require_text(name, 'Label name')
        board = BoardPermissions.get_board_for_member(board_id, user)
        with transaction.atomic():
            label = Label(board=board, name=name)
            if color:
                label.color = color
            label.save()
            log_activity(board.id, user, ActivityLog.ACTION_CREATE, 'label', label.id, snapshot(label))
        return label

    def list_labels(self, user, board_id: int):
        board = BoardPermissions.get_board_for_member(board_id, user)
        return list(board.labels.order_by('name', 'id'))

    def update_label(self, user, label_id: int, name=None, color=None) -> Label:
        label = BoardPermissions.get_label_for_member(label_id, user)
        changes = {}
        if name is not None:
            label.name = changes['name'] = self._require_text(name, 'Label name')
        if color:
            label.color = changes['color'] = color

        with transaction.atomic():
            label.save()
            log_activity(label.board_id, user, ActivityLog.ACTION_UPDATE, 'label', label.id, changes)
        return label

    def delete_label(self, user, label_id: int) -> None:
        label = BoardPermissions.get_label_for_member(label_id, user)
        with transaction.atomic():
            log_activity(label.board_id, user, ActivityLog.ACTION_DELETE, 'label', label.id, {'name': label.name})
            label.delete()

    def add_label_to_task(self, user, task_id: int, label_id: int) -> TaskLabel:
        """The label must belong to the task's board; adding it twice is a conflict"""
        task = BoardPermissions.get_task_for_member(task_id, user)
        label = Label.objects.filter(id=label_id, board_id=task.board_id).first()
        if label is None:
            raise NotFoundError('Label not found or does not belong to this board')
        if TaskLabel.objects.filter(task=task, label=label).exists():
            raise ConflictError('Label already added to task')

        try:
            with transaction.atomic():
                task_label = TaskLabel.objects.create(task=task, label=label)
                log_activity(task.board_id, user, ActivityLog.ACTION_UPDATE, 'task', task.id,
                             {'addedLabelId': label.id})
        except IntegrityError:
            raise ConflictError('Label already added to task')
        return task_label

    def remove_label_from_task(self, user, task_id: int, label_id: int) -> None:
        task = BoardPermissions.get_task_for_member(task_id, user)
        with transaction.atomic():
            deleted, _ = TaskLabel.objects.filter(task=task, label_id=label_id).delete()
            if not deleted:
                raise NotFoundError('Label is not attached to this task')
            log_activity(task.board_id, user, ActivityLog.ACTION_UPDATE, 'task', task.id,
                         {'removedLabelId': int(label_id)})

    # === COMMENTS ===

    def list_comments(self, user, task_id: int):
        task = BoardPermissions.get_task_for_member(task_id, user)
        return list(task.comments.select_related('user').order_by('created_at', 'id'))

    def add_comment(self, user, task_id: int, text: str) -> Comment:
        text = self._require_text(text, 'Comment')
        task = BoardPermissions.get_task_for_member(task_id, user)
        with transaction.atomic():
            comment = Comment.objects.create(task=task, user=user, text=text)
            log_activity(task.board_id, user, ActivityLog.ACTION_CREATE, 'comment', comment.id,
                         {'task_id': task.id, 'text': text})
        return comment

    def delete_comment(self, user, comment_id: int) -> None:
        """Only the author may delete a comment"""
        try:
            comment = Comment.objects.select_related('task').get(id=comment_id)
        except Comment.DoesNotExist:
            raise NotFoundError('Comment not found')
        if comment.user_id != user.id:
            logger.warning(f"🚫 {user.username} tried to delete comment {comment_id} of another user")
            raise AuthorizationError('Not authorized to delete this comment')

        with transaction.atomic():
            log_activity(comment.task.board_id, user, ActivityLog.ACTION_DELETE, 'comment', comment.id,
                         {'task_id': comment.task_id})
            comment.delete()

    # === ACTIVITY ===

    def list_activities(self, user, board_id: int, offset: int = 0, limit: int = 20) -> Tuple[list, int]:
        """Activity of a board, newest first"""
        board = BoardPermissions.get_board_for_member(board_id, user)
        activities = ActivityLog.objects.filter(board_id=board.id).select_related('user').order_by('-created_at', '-id')
        return list(activities[offset:offset + limit]), activities.count()


# Singleton used by the views
board_service = BoardService()
