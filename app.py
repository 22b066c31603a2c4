#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Akuatik admin backend - application factory
"""

import logging
import os
import sys
import time

from flask import Flask, g, request
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config import config as config_map
from database import DatabaseManager
from utils.errors import ApiError
from utils.response import api_error

logger = logging.getLogger(__name__)

HTTP_ERROR_MESSAGES = {
    404: 'Resource not found',
    405: 'Method not allowed',
}


def register_error_handlers(app):
    """Render every error in the error envelope"""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return api_error(error.status_code, error.message, error.errors)

    @app.errorhandler(413)
    def handle_too_large(error):
        limit_mb = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
        return api_error(413, f'File too large. Maximum size is {limit_mb}MB')

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        message = HTTP_ERROR_MESSAGES.get(error.code) or error.description or error.name
        return api_error(error.code, message)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception("Unhandled error in %s %s", request.method, request.path)
        return api_error(500, 'Internal server error')


def create_app(config_name=None, db_manager=None, **overrides):
    app = Flask(__name__)
    env_name = (config_name or os.environ.get('APP_ENV', 'default')).lower()
    config_class = config_map.get(env_name, config_map['default'])
    app.config.from_object(config_class)
    app.config.update(overrides)

    if env_name == 'production' and not (app.config.get('SECRET_KEY') and app.config.get('JWT_SECRET')):
        raise RuntimeError('SECRET_KEY and JWT_SECRET environment variables are required in production')

    config_class.init_app(app)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)
    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})

    @app.before_request
    def start_request_timer():
        g.request_start_time = time.perf_counter()

    @app.after_request
    def log_request_time(response):
        start_time = getattr(g, 'request_start_time', None)
        if start_time is not None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            app.logger.info(
                "Request %s %s took %.2fms, status %d",
                request.method,
                request.path,
                duration_ms,
                response.status_code,
            )
        return response

    if db_manager is None:
        db_manager = DatabaseManager(
            app.config['DATABASE_URL'],
            pool_size=app.config['DB_POOL_SIZE'],
            slow_query_threshold_ms=app.config['SLOW_QUERY_THRESHOLD_MS'],
        )
    app.extensions['db_manager'] = db_manager

    # create missing tables and the default admin; a database outage must not stop startup
    with app.app_context():
        try:
            db_manager.init_database(
                admin_username=app.config['DEFAULT_ADMIN_USERNAME'],
                admin_email=app.config['DEFAULT_ADMIN_EMAIL'],
                admin_password=app.config['DEFAULT_ADMIN_PASSWORD'],
            )
            app.logger.info("Database initialized")
        except SQLAlchemyError as e:
            app.logger.error("Database initialization failed: %s", e)

    register_error_handlers(app)

    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}

    from api import register_blueprints
    register_blueprints(app, app.config['API_PREFIX'])

    return app


if __name__ == '__main__':
    try:
        app = create_app()
        app.run(
            host=app.config.get('HOST', '0.0.0.0'),
            port=app.config.get('PORT', 3000),
            debug=app.config.get('DEBUG', False)
        )
    except KeyboardInterrupt:
        sys.exit(0)
