# config/urls.py

from django.contrib import admin
from django.urls import path, include

from apps.core.views import health_check

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # REST API
    path('api/auth/', include('apps.core.urls')),
    path('api/activities/', include('apps.activity.urls')),
    path('api/', include('apps.board.urls')),

    # Monitoring
    path('health/', health_check, name='health'),
]

# Admin titles
admin.site.site_header = 'Task Board Admin'
admin.site.site_title = 'Task Board'
admin.site.index_title = 'Administration'
