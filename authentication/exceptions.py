# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework.exceptions import APIException
from rest_framework import exceptions, status
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.http import Http404
import logging
from django.conf import settings

logger = logging.getLogger(__name__)


class InvalidInput(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'invalid_input'


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'not_found'


class Unauthorized(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Unauthorized. Admin access required.'
    default_code = 'unauthorized'


class Unavailable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Item is not available.'
    default_code = 'unavailable'


class Internal(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error.'
    default_code = 'internal'


def first_error_message(detail, path=''):
    """
    Flatten DRF error details into one human readable string.

    ``{'items': [{}, {'quantity': ['Bad']}]}`` becomes ``items[1].quantity: Bad``.
    """
    if isinstance(detail, dict):
        for key, value in detail.items():
            if key in ('non_field_errors', 'detail'):
                sub_path = path
            else:
                sub_path = '{}.{}'.format(path, key) if path else str(key)
            message = first_error_message(value, sub_path)
            if message:
                return message
        return ''
    if isinstance(detail, (list, tuple)):
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list, tuple)):
                sub_path = '{}[{}]'.format(path, index) if path else '[{}]'.format(index)
                message = first_error_message(value, sub_path)
            else:
                message = first_error_message(value, path)
            if message:
                return message
        return ''
    text = str(detail)
    if not text:
        return ''
    return '{}: {}'.format(path, text) if path else text


def error_response(message, status_code):
    return Response({'success': False, 'error': message}, status=status_code)


def custom_exception_handler(exc, context):
    """
    Render every failure as ``{"success": false, "error": "..."}``.
    """
    if isinstance(exc, Http404):
        exc = NotFound()

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, exceptions.ValidationError):
            message = first_error_message(exc.detail) or 'Validation error'
        elif isinstance(exc, APIException):
            message = first_error_message(exc.detail) or 'An error occurred'
        else:
            message = 'An error occurred'

        if response.status_code >= 500:
            logger.error(f"Server error: {message}")
        envelope = error_response(message, response.status_code)
        # Headers DRF attached, such as Retry-After and WWW-Authenticate
        for header, value in response.headers.items():
            envelope[header] = value
        return envelope

    # Handle Django ValidationError
    if isinstance(exc, ValidationError):
        logger.error(f"Validation Error: {exc}")
        return error_response('; '.join(exc.messages) or 'Validation error', status.HTTP_400_BAD_REQUEST)

    # Handle Django IntegrityError
    if isinstance(exc, IntegrityError):
        logger.error(f"Integrity Error: {exc}")
        return error_response('This operation violates database constraints', status.HTTP_400_BAD_REQUEST)

    # Handle unexpected errors
    logger.exception(f"Unexpected Error: {exc}")
    message = str(exc) if settings.DEBUG else Internal.default_detail
    return error_response(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
