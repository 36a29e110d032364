"""
REST error mapping

Domain errors become ``{"code", "detail"}`` bodies with the status they
declare; database failures are logged with traceback and answered with
a generic retry message.
"""

import logging

from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_BODY = {
    'code': 'internal_error',
    'detail': 'Something went wrong. Please try again.',
}


def domain_exception_handler(exc, context):
    """DRF EXCEPTION_HANDLER entry point"""
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown'

    if isinstance(exc, DomainError):
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, DatabaseError):
        logger.error("Database error in %s: %s", view_name, exc, exc_info=True)
        return Response(INTERNAL_ERROR_BODY, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        response.data = {
            'code': 'invalid_input',
            'detail': 'Invalid input.',
            'errors': response.data,
        }
    elif isinstance(response.data, dict) and 'detail' in response.data:
        if isinstance(exc, APIException):
            code = exc.default_code
        elif isinstance(exc, Http404):
            code = 'not_found'
        else:
            code = 'permission_denied'
        response.data = {'code': code, 'detail': str(response.data['detail'])}
    return response
