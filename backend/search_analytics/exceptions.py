"""
Engine exceptions and the DRF handler that renders errors in the platform envelope.
"""
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status, exceptions as drf_exceptions
import logging

logger = logging.getLogger(__name__)


class AnalyticsError(Exception):
    """Base class for analytics engine errors."""


class BenchmarkTableError(AnalyticsError, ValueError):
    """A benchmark table is missing its "(unknown)" fallback row."""


class PredictionServiceError(AnalyticsError):
    """The remote prediction service could not produce a usable result."""


class MalformedPredictionResponse(PredictionServiceError):
    """The remote service answered, but without a usable predictions array."""


def _field_errors(data):
    """Flatten serializer errors to ``{field: first message}``."""
    if not isinstance(data, dict):
        return {}
    return {
        field: str(errors[0]) if isinstance(errors, list) and errors else str(errors)
        for field, errors in data.items()
        if field != 'detail'
    }


def custom_exception_handler(exc, context):
    """
    Wrap DRF errors as ``{"error": {"code", "message", "details"?}}``.

    Analytics endpoints only surface authentication failures and invalid
    filter parameters this way; anything DRF does not recognise becomes a 500.
    """
    response = exception_handler(exc, context)
    if response is None:
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return Response(
            {'error': {'code': 'internal_server_error',
                       'message': 'An unexpected error occurred. Please try again later.'}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    details = _field_errors(response.data)
    if isinstance(response.data, dict) and 'detail' in response.data:
        message = str(response.data['detail'])
    elif details:
        field, first = next(iter(details.items()))
        message = f"{field.replace('_', ' ').capitalize()}: {first}"
    else:
        message = 'Invalid request.'

    error = {'code': getattr(exc, 'default_code', 'error'), 'message': message}
    if details:
        error['details'] = details
    response.data = {'error': error}
    return response
