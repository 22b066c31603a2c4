#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Akuatik admin backend - password hashing and bearer tokens
"""

import os
import hmac
import hashlib
from datetime import datetime, timedelta, timezone

from flask import current_app
from jose import jwt, JWTError

from utils.errors import ForbiddenError

HASH_PREFIX = 'pbkdf2_sha256'
SALT_LENGTH = 16
DEFAULT_ITERATIONS = 100000


def _configured_iterations():
    try:
        return int(current_app.config.get('PASSWORD_HASH_ITERATIONS', DEFAULT_ITERATIONS))
    except RuntimeError:
        # outside an application context (CLI, init scripts)
        return DEFAULT_ITERATIONS


def generate_password_hash(password, iterations=None):
    """Hash a password as ``pbkdf2_sha256$<iterations>$<hex(salt+hash)>``.

    The iteration count travels with the hash so raising the configured cost
    factor keeps existing hashes verifiable.
    """
    iterations = iterations or _configured_iterations()
    salt = os.urandom(SALT_LENGTH)
    digest = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, iterations)
    return f"{HASH_PREFIX}${iterations}${(salt + digest).hex()}"


def verify_password(password, password_hash):
    """Check a password against a stored hash"""
    if not password or not password_hash:
        return False

    try:
        prefix, iterations, hex_data = password_hash.split('$', 2)
        iterations = int(iterations)
        raw = bytes.fromhex(hex_data)
    except ValueError:
        return False

    if prefix != HASH_PREFIX or len(raw) < SALT_LENGTH + 32:
        return False

    salt, stored = raw[:SALT_LENGTH], raw[SALT_LENGTH:]
    computed = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, iterations)
    return hmac.compare_digest(computed, stored)


def create_access_token(user_id, role):
    """Issue a signed, time-limited token carrying identity and role"""
    config = current_app.config
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'userId': user_id,
        'role': role,
        'iat': now,
        'exp': now + timedelta(hours=config['JWT_EXPIRES_HOURS']),
    }
    return jwt.encode(payload, config['JWT_SECRET'], algorithm=config['JWT_ALGORITHM'])


def decode_access_token(token):
    """Decode a bearer token; expired and malformed tokens raise ForbiddenError"""
    config = current_app.config
    try:
        payload = jwt.decode(token, config['JWT_SECRET'], algorithms=[config['JWT_ALGORITHM']])
    except JWTError:
        raise ForbiddenError('Invalid or expired token.')

    if 'userId' not in payload or 'role' not in payload:
        raise ForbiddenError('Invalid or expired token.')
    return payload
