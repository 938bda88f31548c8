"""
API error handling

Every error leaves the API as ``{"error": "..."}``. Field-level validation
errors keep their per-field detail under ``details``.
"""
import logging

from django.http import JsonResponse
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceUnavailable(Exception):
    """A third-party integration (Stripe, Resend) is not configured or failed"""

    def __init__(self, message, status_code=status.HTTP_502_BAD_GATEWAY):
        super().__init__(message)
        self.status_code = status_code


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return 'Invalid request'
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else 'Invalid request'
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, ServiceUnavailable):
        logger.error(f"Integration failure: {exc}")
        return Response({'error': str(exc)}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        response.data = {'error': _first_message(exc.detail), 'details': exc.detail}
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'error': str(response.data['detail'])}
    return response


def not_found(request, exception=None):
    return JsonResponse({'error': 'Not Found'}, status=404)


def server_error(request):
    return JsonResponse({'error': 'Internal Server Error'}, status=500)
