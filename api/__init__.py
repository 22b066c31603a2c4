#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Akuatik admin backend - API blueprints
"""

from .auth import auth_bp
from .users import users_bp
from .clubs import clubs_bp
from .events import events_bp
from .starting_lists import starting_lists_bp
from .invoices import invoices_bp
from .public import public_bp
from .file_upload import file_upload_bp

# blueprint -> path under the API prefix
BLUEPRINT_PREFIXES = [
    (auth_bp, '/auth'),
    (users_bp, '/users'),
    (clubs_bp, '/clubs'),
    (events_bp, '/events'),
    (starting_lists_bp, '/events/<int:event_id>/starting-list'),
    (invoices_bp, '/clubs/<int:club_id>/invoices'),
    (public_bp, '/public/kejurkab'),
    (file_upload_bp, '/file-upload'),
]


def register_blueprints(app, api_prefix):
    for blueprint, path in BLUEPRINT_PREFIXES:
        app.register_blueprint(blueprint, url_prefix=f'{api_prefix}{path}')


__all__ = [
    'auth_bp',
    'users_bp',
    'clubs_bp',
    'events_bp',
    'starting_lists_bp',
    'invoices_bp',
    'public_bp',
    'file_upload_bp',
    'register_blueprints',
]
