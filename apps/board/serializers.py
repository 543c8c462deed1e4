# apps/board/serializers.py

"""
Request and response schemas of the board REST API

Request bodies use the camelCase names clients send (boardId, listId,
userId, labelId); responses use the snake_case column names.
"""

import re

from rest_framework import serializers

from apps.core.models import (
    Board, BoardMember, Comment, Label, Task, TaskAssignment, TaskLabel, TaskList
)

HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')


# === Responses ===

class BoardSerializer(serializers.ModelSerializer):
    owner_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Board
        fields = ['id', 'name', 'description', 'owner_id', 'created_at', 'updated_at']


class MemberSerializer(serializers.ModelSerializer):
    board_id = serializers.IntegerField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    first_name = serializers.CharField(source='user.first_name', read_only=True)
    last_name = serializers.CharField(source='user.last_name', read_only=True)

    class Meta:
        model = BoardMember
        fields = ['id', 'board_id', 'user_id', 'role', 'joined_at',
                  'username', 'email', 'first_name', 'last_name']


class TaskListSerializer(serializers.ModelSerializer):
    board_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = TaskList
        fields = ['id', 'board_id', 'name', 'position', 'created_at', 'updated_at']


class LabelSerializer(serializers.ModelSerializer):
    board_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Label
        fields = ['id', 'board_id', 'name', 'color', 'created_at']


class AssignedUserSerializer(serializers.ModelSerializer):
    """One entry of task.assigned_users (the assignment id is what DELETE takes)"""

    task_id = serializers.IntegerField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    first_name = serializers.CharField(source='user.first_name', read_only=True)
    last_name = serializers.CharField(source='user.last_name', read_only=True)
    display_name = serializers.CharField(source='user.display_name', read_only=True)

    class Meta:
        model = TaskAssignment
        fields = ['id', 'task_id', 'user_id', 'username', 'first_name', 'last_name',
                  'display_name', 'assigned_at']


class TaskLabelBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Label
        fields = ['id', 'name', 'color']


class TaskSerializer(serializers.ModelSerializer):
    """Task with its denormalized assignees and labels"""

    list_id = serializers.IntegerField(read_only=True)
    board_id = serializers.IntegerField(read_only=True)
    created_by = serializers.IntegerField(source='created_by_id', read_only=True)
    assigned_users = AssignedUserSerializer(source='assignments', many=True, read_only=True)
    labels = TaskLabelBriefSerializer(many=True, read_only=True)

    class Meta:
        model = Task
        fields = ['id', 'list_id', 'board_id', 'title', 'description', 'position',
                  'due_date', 'priority', 'archived', 'created_by', 'created_at',
                  'updated_at', 'assigned_users', 'labels']


class TaskLabelSerializer(serializers.ModelSerializer):
    task_id = serializers.IntegerField(read_only=True)
    label_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = TaskLabel
        fields = ['id', 'task_id', 'label_id', 'created_at']


class CommentSerializer(serializers.ModelSerializer):
    task_id = serializers.IntegerField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    comment = serializers.CharField(source='text', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    first_name = serializers.CharField(source='user.first_name', read_only=True)
    last_name = serializers.CharField(source='user.last_name', read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'task_id', 'user_id', 'comment', 'created_at',
                  'username', 'email', 'first_name', 'last_name']


# === Requests ===

class BoardCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class BoardUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class MemberAddSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ListCreateSerializer(serializers.Serializer):
    boardId = serializers.IntegerField(source='board_id')
    name = serializers.CharField(max_length=200)


class ListUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    position = serializers.IntegerField(required=False, min_value=0)


class TaskCreateSerializer(serializers.Serializer):
    listId = serializers.IntegerField(source='list_id')
    boardId = serializers.IntegerField(source='board_id', required=False)
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    # Unknown values are coerced to medium by BoardService
    priority = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    dueDate = serializers.DateField(source='due_date', required=False, allow_null=True)


class TaskUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    priority = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    dueDate = serializers.DateField(source='due_date', required=False, allow_null=True)
    archived = serializers.BooleanField(required=False)
    listId = serializers.IntegerField(source='list_id', required=False)
    position = serializers.IntegerField(required=False, min_value=0)


class AssignSerializer(serializers.Serializer):
    userId = serializers.IntegerField(source='user_id')


class LabelUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    color = serializers.CharField(required=False, allow_blank=True)

    def validate_color(self, value):
        if value and not HEX_COLOR.match(value):
            raise serializers.ValidationError('Color must be a hex value like #3B82F6')
        return value


class LabelCreateSerializer(LabelUpdateSerializer):
    boardId = serializers.IntegerField(source='board_id')
    name = serializers.CharField(max_length=100)


class TaskLabelAddSerializer(serializers.Serializer):
    labelId = serializers.IntegerField(source='label_id')


class CommentCreateSerializer(serializers.Serializer):
    comment = serializers.CharField(source='text', trim_whitespace=True)
