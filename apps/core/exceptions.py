# apps/core/exceptions.py

"""
Error taxonomy shared by the REST views, the service layer and the websocket consumer

Every error is an APIException so DRF renders it with the right status code;
api_exception_handler flattens the body to {"error": "<message>"}.
"""

import logging

from django.db import DatabaseError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BoardError(exceptions.APIException):
    """Base class for all application errors"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'error'

    @property
    def message(self):
        return str(self.detail)


class ValidationError(BoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'
    default_code = 'invalid'


class AuthenticationError(BoardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication required'
    default_code = 'not_authenticated'


class AuthorizationError(BoardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied'
    default_code = 'permission_denied'


class NotFoundError(BoardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class ConflictError(BoardError):
    """Duplicate of a unique pair (user, membership, assignment, task label)"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Already exists'
    default_code = 'conflict'


class StorageError(BoardError):
    default_detail = 'Internal server error'
    default_code = 'storage_error'


def _first_message(detail):
    """Picks the first human readable message out of a DRF error detail"""
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return 'Invalid request'
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else 'Invalid request'
    return str(detail)


def api_exception_handler(exc, context):
    """
    DRF exception handler

    - Serializer field errors become {"error": ..., "fields": {...}}
    - Framework auth errors render like AuthenticationError
    - DatabaseError is logged with traceback and hidden behind StorageError
    """
    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.exception(f"Storage failure in {view.__class__.__name__ if view else 'request'}")
        exc = StorageError()
    elif isinstance(exc, Http404):
        exc = NotFoundError()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        detail = exc.detail
        body = {'error': _first_message(detail)}
        if isinstance(detail, dict):
            body['fields'] = detail
        response.data = body
        return response

    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.status_code = status.HTTP_401_UNAUTHORIZED
        response.data = {'error': _first_message(exc.detail)}
        return response

    response.data = {'error': _first_message(exc.detail)}
    return response

