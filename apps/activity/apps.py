# apps/activity/apps.py

from django.apps import AppConfig


class ActivityConfig(AppConfig):
    """Activity log app"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.activity'
    verbose_name = 'Activity Log'
