#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Akuatik admin backend - error taxonomy

Handlers and database mixins raise these; the app-level error handler turns
them into the error envelope.
"""


class ApiError(Exception):
    """Base class for errors that map to an HTTP response"""
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors


class ValidationError(ApiError):
    """Malformed or missing input; errors is a list of {field, message}"""
    status_code = 400
    default_message = 'Validation failed'


class BusinessRuleError(ApiError):
    """Capacity exceeded, linked records, invalid status change"""
    status_code = 400
    default_message = 'Request violates a business rule'


class AuthenticationError(ApiError):
    status_code = 401
    default_message = 'Authentication failed'


class ForbiddenError(ApiError):
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Resource not found'


class ConflictError(ApiError):
    """Uniqueness violation"""
    status_code = 409
    default_message = 'Resource already exists'


def field_error(field, message):
    return {'field': field, 'message': message}
