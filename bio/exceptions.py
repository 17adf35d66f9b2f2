import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class AccessDenied(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid PIN'
    default_code = 'invalid_pin'


class PinRequired(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'This bio page is protected by a PIN'
    default_code = 'pin_required'
    extra = {'requiresPin': True}


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists'
    default_code = 'conflict'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("unhandled API error in %s", context.get('view').__class__.__name__, exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}}, status=500)
    if isinstance(exc, ValidationError):
        return Response(
            {'ok': False, 'error': {'code': 'validation_error', 'message': 'Validation error', 'details': resp.data}},
            status=resp.status_code,
        )
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    code = getattr(exc, 'default_code', None) or 'api_error'
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            code = codes
    body = {'ok': False, 'error': {'code': code, 'message': detail}}
    body.update(getattr(exc, 'extra', {}))
    return Response(body, status=resp.status_code, headers=_auth_headers(resp))


def _auth_headers(resp):
    # keep WWW-Authenticate / Retry-After set by DRF for 401 and 429
    return {k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After')}
