import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    """The request clashes with the current state of a team (duplicates, capacity, ownership)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request conflicts with the current state of the team.'
    default_code = 'conflict'


def flatten_detail(detail):
    """Collapse DRF error details (dicts, lists, strings) into one message."""
    if isinstance(detail, dict):
        parts = []
        for field, value in detail.items():
            message = flatten_detail(value)
            if field in ('detail', 'non_field_errors'):
                parts.append(message)
            else:
                parts.append(f'{field}: {message}')
        return ', '.join(parts)
    if isinstance(detail, (list, tuple)):
        return ', '.join(flatten_detail(item) for item in detail)
    return str(detail)


def envelope_exception_handler(exc, context):
    """Wrap every API error into the ``{success: false, message}`` envelope."""
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            'Unhandled error in %s',
            view.__class__.__name__ if view else 'unknown view',
            exc_info=exc,
        )
        return Response(
            {'success': False, 'message': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = {'success': False, 'message': flatten_detail(response.data)}
    return response
