# apps/board/views.py

"""
REST endpoints of the board

Views only parse the request with a serializer, delegate to BoardService
and render the result; access checks and activity logging live in the
service. Realtime fan-out is emitted by the client over the websocket
after a successful response.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.utils import parse_pagination

from .serializers import (
    AssignedUserSerializer, AssignSerializer, BoardCreateSerializer, BoardSerializer,
    BoardUpdateSerializer, CommentCreateSerializer, CommentSerializer, LabelCreateSerializer,
    LabelSerializer, LabelUpdateSerializer, ListCreateSerializer, ListUpdateSerializer,
    MemberAddSerializer, MemberSerializer, TaskCreateSerializer, TaskLabelAddSerializer,
    TaskLabelSerializer, TaskListSerializer, TaskSerializer, TaskUpdateSerializer
)
from .services import board_service


def _validated(serializer_class, request):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


# === BOARDS ===

class BoardListCreateView(APIView):
    """
    GET  - boards of the current user (?search=&page=&limit=)
    POST - create a board owned by the current user
    """

    def get(self, request):
        page, limit, offset = parse_pagination(request.query_params, default_limit=10)
        search = request.query_params.get('search', '').strip()
        boards, total = board_service.list_boards(request.user, search, offset, limit)
        return Response({
            'boards': BoardSerializer(boards, many=True).data,
            'total': total,
            'page': page,
            'limit': limit,
        })

    def post(self, request):
        data = _validated(BoardCreateSerializer, request)
        board = board_service.create_board(request.user, data['name'], data.get('description'))
        return Response(BoardSerializer(board).data, status=status.HTTP_201_CREATED)


class BoardDetailView(APIView):
    def get(self, request, board_id):
        board, lists, tasks = board_service.get_board_detail(request.user, board_id)
        return Response({
            'board': BoardSerializer(board).data,
            'lists': TaskListSerializer(lists, many=True).data,
            'tasks': TaskSerializer(tasks, many=True).data,
        })

    def put(self, request, board_id):
        data = _validated(BoardUpdateSerializer, request)
        board = board_service.update_board(request.user, board_id, **data)
        return Response(BoardSerializer(board).data)

    def delete(self, request, board_id):
        board_service.delete_board(request.user, board_id)
        return Response({'message': 'Board deleted successfully'})


class BoardMembersView(APIView):
    def get(self, request, board_id):
        members = board_service.list_members(request.user, board_id)
        return Response(MemberSerializer(members, many=True).data)

    def post(self, request, board_id):
        data = _validated(MemberAddSerializer, request)
        member = board_service.add_member(request.user, board_id, data['email'])
        return Response(MemberSerializer(member).data, status=status.HTTP_201_CREATED)


# === LISTS ===

class ListCreateView(APIView):
    def post(self, request):
        data = _validated(ListCreateSerializer, request)
        task_list = board_service.create_list(request.user, data['board_id'], data['name'])
        return Response(TaskListSerializer(task_list).data, status=status.HTTP_201_CREATED)


class ListDetailView(APIView):
    def put(self, request, list_id):
        data = _validated(ListUpdateSerializer, request)
        task_list = board_service.update_list(request.user, list_id, **data)
        return Response(TaskListSerializer(task_list).data)

    def delete(self, request, list_id):
        board_service.delete_list(request.user, list_id)
        return Response({'message': 'List deleted successfully'})


# === TASKS ===

class TaskCreateView(APIView):
    def post(self, request):
        data = _validated(TaskCreateSerializer, request)
        task = board_service.create_task(request.user, **data)
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


class TaskDetailView(APIView):
    """
    GET    - task with assignees and labels
    PUT    - partial update; listId + position moves the task
    DELETE - remove the task
    """

    def get(self, request, task_id):
        return Response(TaskSerializer(board_service.get_task(request.user, task_id)).data)

    def put(self, request, task_id):
        data = _validated(TaskUpdateSerializer, request)
        task = board_service.update_task(request.user, task_id, **data)
        return Response(TaskSerializer(task).data)

    def delete(self, request, task_id):
        board_service.delete_task(request.user, task_id)
        return Response({'message': 'Task deleted successfully'})


class TaskAssignView(APIView):
    def post(self, request, task_id):
        data = _validated(AssignSerializer, request)
        assignment = board_service.assign_user(request.user, task_id, data['user_id'])
        return Response(AssignedUserSerializer(assignment).data, status=status.HTTP_201_CREATED)


class TaskUnassignView(APIView):
    def delete(self, request, task_id, assignment_id):
        board_service.unassign_user(request.user, task_id, assignment_id)
        return Response({'message': 'User removed from task'})


# === COMMENTS ===

class TaskCommentsView(APIView):
    def get(self, request, task_id):
        comments = board_service.list_comments(request.user, task_id)
        return Response(CommentSerializer(comments, many=True).data)

    def post(self, request, task_id):
        data = _validated(CommentCreateSerializer, request)
        comment = board_service.add_comment(request.user, task_id, data['text'])
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class CommentDetailView(APIView):
    def delete(self, request, comment_id):
        board_service.delete_comment(request.user, comment_id)
        return Response({'message': 'Comment deleted successfully'})


# === LABELS ===

class LabelCreateView(APIView):
    def post(self, request):
        data = _validated(LabelCreateSerializer, request)
        label = board_service.create_label(request.user, **data)
        return Response(LabelSerializer(label).data, status=status.HTTP_201_CREATED)


class BoardLabelsView(APIView):
    def get(self, request, board_id):
        labels = board_service.list_labels(request.user, board_id)
        return Response(LabelSerializer(labels, many=True).data)


class LabelDetailView(APIView):
    def put(self, request, label_id):
        data = _validated(LabelUpdateSerializer, request)
        label = board_service.update_label(request.user, label_id, **data)
        return Response(LabelSerializer(label).data)

    def delete(self, request, label_id):
        board_service.delete_label(request.user, label_id)
        return Response({'message': 'Label deleted successfully'})


class TaskLabelsView(APIView):
    def post(self, request, task_id):
        data = _validated(TaskLabelAddSerializer, request)
        task_label = board_service.add_label_to_task(request.user, task_id, data['label_id'])
        return Response(TaskLabelSerializer(task_label).data, status=status.HTTP_201_CREATED)


class TaskLabelDetailView(APIView):
    def delete(self, request, task_id, label_id):
        board_service.remove_label_from_task(request.user, task_id, label_id)
        return Response({'message': 'Label removed from task'})
