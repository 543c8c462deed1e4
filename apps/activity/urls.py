# apps/activity/urls.py

from django.urls import path
from . import views

app_name = 'activity'

urlpatterns = [
    path('<int:board_id>/', views.ActivityListView.as_view(), name='list'),
]
