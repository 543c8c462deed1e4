# apps/core/models.py

from django.contrib.auth.models import AbstractUser
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class User(AbstractUser):
    """
    Board user

    Identity (username, email) is immutable; names are display fields only.
    """

    email = models.EmailField(unique=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board_user'
        ordering = ['username']

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    def __str__(self):
        return self.username


class Board(models.Model):
    """Collaborative board - root of the list/task ownership tree"""

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='owned_boards'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.name


class BoardMember(models.Model):
    """User membership in a board - the authorization unit"""

    ROLE_OWNER = 'owner'
    ROLE_MEMBER = 'member'
    ROLE_CHOICES = [
        (ROLE_OWNER, 'Owner'),
        (ROLE_MEMBER, 'Member'),
    ]

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='members'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='board_memberships'
    )
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'board_member'
        ordering = ['joined_at', 'id']
        constraints = [
            models.UniqueConstraint(fields=['board', 'user'], name='unique_board_member'),
        ]

    def __str__(self):
        return f"{self.user.username} @ {self.board.name} ({self.role})"


class TaskList(models.Model):
    """
    Ordered column of a board

    Positions may collide after a reorder; reads sort by (position, id).
    """

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='lists'
    )
    name = models.CharField(max_length=200)
    position = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'list'
        ordering = ['position', 'id']

    def __str__(self):
        return f"{self.name} - {self.board.name}"


class Label(models.Model):
    """Board label"""

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='labels'
    )
    name = models.CharField(max_length=100)
    color = models.CharField(max_length=7, default='#6B7280')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'label'
        ordering = ['name', 'id']

    def __str__(self):
        return self.name


class Task(models.Model):
    """
    Unit of work inside a list

    board is denormalized and must always match list.board.
    """

    PRIORITY_LOW = 'low'
    PRIORITY_MEDIUM = 'medium'
    PRIORITY_HIGH = 'high'
    PRIORITY_CHOICES = [
        (PRIORITY_LOW, 'Low'),
        (PRIORITY_MEDIUM, 'Medium'),
        (PRIORITY_HIGH, 'High'),
    ]

    list = models.ForeignKey(
        TaskList,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    position = models.IntegerField(default=0)
    due_date = models.DateField(null=True, blank=True)
    priority = models.CharField(
        max_length=10,
        choices=PRIORITY_CHOICES,
        default=PRIORITY_MEDIUM
    )
    archived = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_tasks'
    )
    labels = models.ManyToManyField(
        Label,
        through='TaskLabel',
        related_name='tasks',
        blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task'
        ordering = ['position', 'id']

    def save(self, *args, **kwargs):
        """Keeps board_id tied to the board of the current list"""
        if self.board_id is None:
            self.board_id = self.list.board_id
        elif self.list.board_id != self.board_id:
            raise ValueError(
                f"Task {self.pk} cannot live in list {self.list_id} of another board"
            )
        super().save(*args, **kwargs)

    def __str__(self):
        return self.title


class TaskAssignment(models.Model):
    """User assigned to a task"""

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='assignments'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='task_assignments'
    )
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'task_assignment'
        ordering = ['assigned_at', 'id']
        constraints = [
            models.UniqueConstraint(fields=['task', 'user'], name='unique_task_assignment'),
        ]

    def __str__(self):
        return f"{self.user.username} -> {self.task.title}"


class TaskLabel(models.Model):
    """Task/label join table"""

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='task_labels'
    )
    label = models.ForeignKey(
        Label,
        on_delete=models.CASCADE,
        related_name='task_labels'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'task_label'
        constraints = [
            models.UniqueConstraint(fields=['task', 'label'], name='unique_task_label'),
        ]


class Comment(models.Model):
    """Immutable comment on a task"""

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    text = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'comment'
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"Comment by {self.user.username} on {self.created_at:%d/%m/%Y}"


class ActivityLog(models.Model):
    """
    Append-only audit trail

    board_id and entity_id are not foreign keys: entries outlive the
    entities they reference.
    """

    ACTION_CREATE = 'create'
    ACTION_UPDATE = 'update'
    ACTION_DELETE = 'delete'
    ACTION_ASSIGN = 'assign'
    ACTION_CHOICES = [
        (ACTION_CREATE, 'Create'),
        (ACTION_UPDATE, 'Update'),
        (ACTION_DELETE, 'Delete'),
        (ACTION_ASSIGN, 'Assign'),
    ]

    board_id = models.BigIntegerField(db_index=True)
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activities'
    )
    action = models.CharField(max_length=10, choices=ACTION_CHOICES)
    entity_type = models.CharField(max_length=20)
    entity_id = models.BigIntegerField()
    changes = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'activity_log'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['board_id', 'created_at'], name='activity_board_created_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}#{self.entity_id} on board {self.board_id}"
