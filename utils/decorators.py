#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Akuatik admin backend - decorators (auth, validation, logging)
"""

import logging
import time
from functools import wraps

from flask import g, request
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from database import get_db_manager
from utils.errors import (
    ApiError,
    AuthenticationError,
    ForbiddenError,
    ValidationError,
    field_error,
)
from utils.response import api_error
from utils.security import decode_access_token

logger = logging.getLogger(__name__)


def token_required(f):
    """Bearer token verification decorator

    Missing token -> 401, malformed/expired token -> 403. On success the
    token's identity is available as g.current_user ({id, role}).
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        header = request.headers.get('Authorization', '')
        token = header[7:].strip() if header.lower().startswith('bearer ') else ''
        if not token:
            raise AuthenticationError('Access denied. No token provided.')

        payload = decode_access_token(token)
        g.current_user = {'id': payload['userId'], 'role': payload['role']}
        return f(*args, **kwargs)
    return decorated_function


def role_required(required_roles):
    """Role check decorator, applied after token_required

    Args:
        required_roles: a role name or a list of role names
    """
    roles = [required_roles] if isinstance(required_roles, str) else list(required_roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, 'current_user', None)
            if not user:
                raise AuthenticationError('Access denied. No token provided.')
            if user['role'] not in roles:
                raise ForbiddenError('You do not have permission to perform this action')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    """Admin-only shortcut"""
    return role_required('admin')(f)


def format_validation_errors(exc):
    """pydantic errors -> [{field, message}] with dotted field paths"""
    errors = []
    for err in exc.errors():
        field = '.'.join(str(part) for part in err.get('loc', ())) or 'body'
        message = err.get('msg', 'Invalid value')
        # value_error messages carry a "Value error, " prefix
        if message.startswith('Value error, '):
            message = message[len('Value error, '):]
        errors.append(field_error(field, message))
    return errors


def validate_body(schema):
    """Validate the JSON body against a pydantic model

    The parsed model is passed to the view as the ``body`` keyword argument.

    Args:
        schema: pydantic model class
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            data = request.get_json(silent=True)
            if data is None:
                if request.data:
                    raise ValidationError('Request body must be valid JSON')
                data = {}
            if not isinstance(data, dict):
                raise ValidationError('Request body must be a JSON object')

            try:
                kwargs['body'] = schema.model_validate(data)
            except PydanticValidationError as exc:
                raise ValidationError('Validation failed', format_validation_errors(exc))
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def validate_query(schema):
    """Validate query string parameters; passed to the view as ``query``"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                kwargs['query'] = schema.model_validate(request.args.to_dict())
            except PydanticValidationError as exc:
                raise ValidationError('Validation failed', format_validation_errors(exc))
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def log_action(action_name):
    """Operation log decorator

    Args:
        action_name: name written to the log
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, 'current_user', None) or {}
            user_id = user.get('id')
            role = user.get('role', 'anonymous')

            start_time = time.perf_counter()
            logger.info("User %s (%s) started: %s", user_id, role, action_name)

            try:
                result = f(*args, **kwargs)
            except ApiError as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.warning("User %s (%s) rejected: %s, %.1f ms, %s",
                               user_id, role, action_name, duration_ms, e.message)
                raise
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error("User %s (%s) failed: %s, %.1f ms, error: %s",
                             user_id, role, action_name, duration_ms, e)
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info("User %s (%s) completed: %s, %.1f ms",
                        user_id, role, action_name, duration_ms)
            return result
        return decorated_function
    return decorator


def handle_db_errors(f):
    """Unexpected error decorator

    ApiError and HTTP errors propagate to the app error handlers; anything else is
    logged with its traceback and answered with a generic 500.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (ApiError, HTTPException):
            raise
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return api_error(500, 'Internal server error')
    return decorated_function


def assert_club_access(club_id):
    """Admins reach every club; a club account only its own"""
    user = g.current_user
    if user['role'] == 'admin':
        return
    if user['role'] == 'club' and get_db_manager().get_user_club_id(user['id']) == club_id:
        return
    raise ForbiddenError('You can only access your own club')


def club_access_required(f):
    """Apply assert_club_access to the route's club_id"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        assert_club_access(kwargs['club_id'])
        return f(*args, **kwargs)
    return decorated_function
