# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Boards
    path('boards/', views.BoardListCreateView.as_view(), name='boards'),
    path('boards/<int:board_id>/', views.BoardDetailView.as_view(), name='board_detail'),
    path('boards/<int:board_id>/members/', views.BoardMembersView.as_view(), name='board_members'),

    # Lists
    path('lists/', views.ListCreateView.as_view(), name='lists'),
    path('lists/<int:list_id>/', views.ListDetailView.as_view(), name='list_detail'),

    # Tasks
    path('tasks/', views.TaskCreateView.as_view(), name='tasks'),
    path('tasks/<int:task_id>/', views.TaskDetailView.as_view(), name='task_detail'),
    path('tasks/<int:task_id>/assign/', views.TaskAssignView.as_view(), name='task_assign'),
    path('tasks/<int:task_id>/assign/<int:assignment_id>/', views.TaskUnassignView.as_view(), name='task_unassign'),

    # Comments
    path('tasks/<int:task_id>/comments/', views.TaskCommentsView.as_view(), name='task_comments'),
    path('comments/<int:comment_id>/', views.CommentDetailView.as_view(), name='comment_detail'),

    # Labels
    path('labels/', views.LabelCreateView.as_view(), name='labels'),
    path('labels/board/<int:board_id>/', views.BoardLabelsView.as_view(), name='board_labels'),
    path('labels/<int:label_id>/', views.LabelDetailView.as_view(), name='label_detail'),
    path('labels/task/<int:task_id>/', views.TaskLabelsView.as_view(), name='task_labels'),
    path('labels/task/<int:task_id>/<int:label_id>/', views.TaskLabelDetailView.as_view(), name='task_label_detail'),
]
