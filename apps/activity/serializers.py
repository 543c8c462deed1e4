# apps/activity/serializers.py

from rest_framework import serializers

from apps.core.models import ActivityLog


class ActivityLogSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = ActivityLog
        fields = ['id', 'board_id', 'user_id', 'username', 'action', 'entity_type',
                  'entity_id', 'changes', 'created_at']
