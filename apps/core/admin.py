# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import (
    User, Board, BoardMember, TaskList, Task, TaskAssignment,
    Label, TaskLabel, Comment, ActivityLog
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for the custom user model"""

    list_display = ['username', 'email', 'get_full_name', 'is_active', 'date_joined']
    list_filter = ['is_staff', 'is_active', 'date_joined']
    search_fields = ['username', 'first_name', 'last_name', 'email']
    ordering = ['-date_joined']


class BoardMemberInline(admin.TabularInline):
    model = BoardMember
    extra = 0
    readonly_fields = ['joined_at']


class TaskListInline(admin.TabularInline):
    model = TaskList
    extra = 0
    fields = ['name', 'position']


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    """Board admin with members and lists inline"""

    list_display = ['name', 'owner', 'members_count', 'lists_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'owner__username']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [BoardMemberInline, TaskListInline]

    def members_count(self, obj):
        return obj.members.count()

    members_count.short_description = 'Members'

    def lists_count(self, obj):
        return obj.lists.count()

    lists_count.short_description = 'Lists'


@admin.register(BoardMember)
class BoardMemberAdmin(admin.ModelAdmin):
    list_display = ['user', 'board', 'role', 'joined_at']
    list_filter = ['role']
    search_fields = ['user__username', 'board__name']


@admin.register(TaskList)
class TaskListAdmin(admin.ModelAdmin):
    list_display = ['name', 'board', 'position', 'tasks_count']
    list_filter = ['board']
    ordering = ['board', 'position', 'id']

    def tasks_count(self, obj):
        return obj.tasks.count()

    tasks_count.short_description = 'Tasks'


class TaskAssignmentInline(admin.TabularInline):
    model = TaskAssignment
    extra = 0
    readonly_fields = ['assigned_at']


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0
    readonly_fields = ['user', 'text', 'created_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Task admin"""

    list_display = ['title', 'list', 'board', 'position', 'priority_badge', 'due_date', 'archived']
    list_filter = ['priority', 'archived', 'board']
    search_fields = ['title', 'description']
    readonly_fields = ['board', 'created_at', 'updated_at']
    inlines = [TaskAssignmentInline, CommentInline]

    def priority_badge(self, obj):
        """Priority with a colored badge"""
        colors = {
            Task.PRIORITY_LOW: '#10B981',
            Task.PRIORITY_MEDIUM: '#F59E0B',
            Task.PRIORITY_HIGH: '#EF4444',
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            colors.get(obj.priority, '#6B7280'), obj.get_priority_display()
        )

    priority_badge.short_description = 'Priority'


@admin.register(Label)
class LabelAdmin(admin.ModelAdmin):
    list_display = ['name', 'board', 'color_preview']
    list_filter = ['board']

    def color_preview(self, obj):
        return format_html(
            '<div style="width: 20px; height: 20px; background-color: {}; border-radius: 3px;"></div>',
            obj.color
        )

    color_preview.short_description = 'Color'


admin.site.register(TaskLabel)


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['task', 'user', 'created_at']
    search_fields = ['text', 'user__username']
    readonly_fields = ['created_at']


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    """Read-only audit trail"""

    list_display = ['created_at', 'board_id', 'user', 'action', 'entity_type', 'entity_id']
    list_filter = ['action', 'entity_type']
    search_fields = ['user__username']
    readonly_fields = ['board_id', 'user', 'action', 'entity_type', 'entity_id', 'changes', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
