# apps/core/views.py

import logging

from django.core.cache import cache
from django.db import DatabaseError
from django.http import JsonResponse
from django.utils import timezone
from django_redis.exceptions import ConnectionInterrupted
from redis.exceptions import RedisError
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .auth_service import auth_service
from .models import User
from .serializers import LoginSerializer, SignupSerializer, UserSerializer

logger = logging.getLogger(__name__)


# === AUTHENTICATION ===

class SignupView(APIView):
    """
    Account creation

    The HTTP layer only validates the payload; account rules live in
    AuthenticationService.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user, token = auth_service.signup(serializer.validated_data)
        return Response(
            {'message': 'User created successfully', 'user': UserSerializer(user).data, 'token': token},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user, token = auth_service.login(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
        )
        return Response({'message': 'Login successful', 'user': UserSerializer(user).data, 'token': token})


class MeView(APIView):
    """Current user"""

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class UserListView(APIView):
    """All users, for the assignee picker"""

    def get(self, request):
        return Response(UserSerializer(auth_service.list_users(), many=True).data)


# === MONITORING ===

def health_check(request):
    """
    Health check for monitoring

    Database and cache are checked separately; any failure answers 503.
    """
    checks = {}

    try:
        User.objects.exists()
        checks['database'] = 'ok'
    except DatabaseError:
        logger.exception("Health check: database unavailable")
        checks['database'] = 'error'

    try:
        cache.set('health_check', 'ok', 60)
        cache.get('health_check')
        checks['cache'] = 'ok'
    except (ConnectionInterrupted, RedisError):
        logger.exception("Health check: cache unavailable")
        checks['cache'] = 'error'

    healthy = all(value == 'ok' for value in checks.values())
    return JsonResponse({
        'status': 'ok' if healthy else 'unhealthy',
        **checks,
        'timestamp': timezone.now().isoformat(),
    }, status=200 if healthy else 503)
