# apps/activity/views.py

from rest_framework.response import Response
from rest_framework.views import APIView

from apps.board.services import board_service
from apps.core.utils import parse_pagination

from .serializers import ActivityLogSerializer


class ActivityListView(APIView):
    """
    Activity feed of a board, newest first

    Query params: page (default 1), limit (default 20)
    """

    def get(self, request, board_id):
        page, limit, offset = parse_pagination(request.query_params, default_limit=20)
        activities, total = board_service.list_activities(request.user, board_id, offset, limit)
        return Response({
            'activities': ActivityLogSerializer(activities, many=True).data,
            'total': total,
            'page': page,
            'limit': limit,
        })
