"""
Domain errors and the unified API exception handler.

Every error leaving the API is rendered as
``{'ok': False, 'error': {'code': ..., 'message': ...}}``; validation
failures additionally carry the complete list of violated fields.
"""
from __future__ import annotations

import logging

from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class RecordError(Exception):
    code = 'error'
    status_code = 500
    default_message = 'Server error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RecordError):
    """One or more field-level violations, always reported together."""
    code = 'validation_error'
    status_code = 400
    default_message = 'Validation failed'

    def __init__(self, errors: list[dict], message: str | None = None):
        self.errors = list(errors)
        super().__init__(message)


class AuthorizationError(RecordError):
    code = 'authorization_error'
    status_code = 401
    default_message = 'Authentication credentials were not provided or are invalid'


class NotFoundError(RecordError):
    code = 'not_found'
    status_code = 404
    default_message = 'Employee not found'


class ConflictError(RecordError):
    code = 'conflict'
    status_code = 409
    default_message = 'Employee ID already exists'


class DependencyError(RecordError):
    """The record store or the QR encoder is unavailable."""
    code = 'dependency_error'
    status_code = 503
    default_message = 'A required service is unavailable'


def error_body(code: str, message, errors: list[dict] | None = None) -> dict:
    body: dict = {'ok': False, 'error': {'code': code, 'message': message}}
    if errors is not None:
        body['error']['errors'] = errors
    return body


def flatten_drf_errors(detail, prefix: str = '') -> list[dict]:
    """Turn DRF's nested ``{field: [msg, ...]}`` detail into a flat list.

    Nested paths read ``emergencyContacts[0].phone``; object-level errors
    are reported against the object itself.
    """
    out: list[dict] = []
    if isinstance(detail, dict):
        for key, value in detail.items():
            if key == api_settings.NON_FIELD_ERRORS_KEY:
                field = prefix
            elif isinstance(key, int):
                field = f"{prefix}[{key}]"
            else:
                field = f"{prefix}.{key}" if prefix else str(key)
            out.extend(flatten_drf_errors(value, field))
    elif isinstance(detail, list):
        for i, item in enumerate(detail):
            # a many=True serializer reports one dict per item, empty when valid
            field = f"{prefix}[{i}]" if isinstance(item, dict) else prefix
            out.extend(flatten_drf_errors(item, field))
    else:
        out.append({'field': prefix or 'non_field_errors', 'message': str(detail)})
    return out


def api_exception_handler(exc, context):
    if isinstance(exc, RecordError):
        errors = exc.errors if isinstance(exc, ValidationError) else None
        return Response(error_body(exc.code, exc.message, errors), status=exc.status_code)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'))
        return Response(error_body('server_error', 'Server error'), status=500)

    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        resp.data = error_body(AuthorizationError.code, str(exc.detail))
        return resp
    if isinstance(exc, drf_exceptions.ValidationError):
        resp.data = error_body(ValidationError.code, ValidationError.default_message,
                               flatten_drf_errors(exc.detail))
        return resp
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    resp.data = error_body(getattr(exc, 'default_code', 'api_error'), detail)
    return resp
