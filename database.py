#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Akuatik admin backend - database connection and operations
"""

import logging
import time
from contextlib import contextmanager

from flask import current_app
from sqlalchemy import create_engine, event, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import Config
from models import Base, User, UserRole
from utils.security import generate_password_hash
from db_modules.db_users import UserDbMixin
from db_modules.db_clubs import ClubDbMixin
from db_modules.db_events import EventDbMixin
from db_modules.db_starting_lists import StartingListDbMixin
from db_modules.db_invoices import InvoiceDbMixin
from db_modules.db_public import PublicRegistrationDbMixin
from db_modules.db_imports import ImportDbMixin

logger = logging.getLogger(__name__)


def _engine_options(database_url, pool_size):
    if database_url.startswith('sqlite'):
        options = {'connect_args': {'check_same_thread': False, 'timeout': 30}}
        if database_url in ('sqlite://', 'sqlite:///:memory:'):
            # one shared connection, otherwise every session sees an empty database
            options['poolclass'] = StaticPool
        return options
    return {
        'pool_size': pool_size,
        'pool_pre_ping': True,
        'pool_recycle': 3600,
    }


def _install_slow_query_log(engine, threshold_ms):
    @event.listens_for(engine, 'before_cursor_execute')
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault('query_start_time', []).append(time.perf_counter())

    @event.listens_for(engine, 'after_cursor_execute')
    def _log_slow(conn, cursor, statement, parameters, context, executemany):
        started = conn.info['query_start_time'].pop()
        duration_ms = (time.perf_counter() - started) * 1000
        if duration_ms >= threshold_ms:
            logger.warning("Slow query took %.1f ms: %s; params=%s",
                           duration_ms, statement, parameters)

    @event.listens_for(engine, 'handle_error')
    def _drop_timer(context):
        # after_cursor_execute does not fire for a failed statement
        conn = context.connection
        if conn is not None and not context.is_disconnect:
            timers = conn.info.get('query_start_time')
            if timers:
                timers.pop()


def _install_sqlite_foreign_keys(engine):
    @event.listens_for(engine, 'connect')
    def _enable_fk(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


class DatabaseManager(
    UserDbMixin,
    ClubDbMixin,
    EventDbMixin,
    StartingListDbMixin,
    InvoiceDbMixin,
    PublicRegistrationDbMixin,
    ImportDbMixin,
):
    """Persistence handle.

    Built once at process start and stored on the app; every request opens its
    own session through session_scope().
    """

    def __init__(self, database_url=None, pool_size=None, slow_query_threshold_ms=None):
        self.database_url = database_url or Config.DATABASE_URL
        self.engine = create_engine(
            self.database_url,
            future=True,
            **_engine_options(self.database_url, pool_size or Config.DB_POOL_SIZE),
        )
        if self.engine.dialect.name == 'sqlite':
            _install_sqlite_foreign_keys(self.engine)
        _install_slow_query_log(
            self.engine,
            slow_query_threshold_ms if slow_query_threshold_ms is not None
            else Config.SLOW_QUERY_THRESHOLD_MS,
        )
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False,
                                            autoflush=False, future=True)

    @contextmanager
    def session_scope(self):
        """Transaction scope: commit on success, roll back on any exception"""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, admin_username=None, admin_email=None, admin_password=None):
        """Create missing tables and the default admin account"""
        Base.metadata.create_all(self.engine)
        logger.info("Database tables verified (%s)", self.engine.dialect.name)
        self._create_default_admin(
            admin_username or Config.DEFAULT_ADMIN_USERNAME,
            admin_email or Config.DEFAULT_ADMIN_EMAIL,
            admin_password or Config.DEFAULT_ADMIN_PASSWORD,
        )

    def drop_all(self):
        Base.metadata.drop_all(self.engine)

    def _create_default_admin(self, username, email, password):
        with self.session_scope() as session:
            existing = session.scalar(
                select(User.id).where(User.role == UserRole.ADMIN).limit(1)
            )
            if existing:
                return
            session.add(User(
                username=username,
                email=email,
                password=generate_password_hash(password),
                role=UserRole.ADMIN,
                is_active=True,
            ))
        logger.info("Default admin account created (username: %s)", username)

    def dispose(self):
        self.engine.dispose()


def get_db_manager():
    """The DatabaseManager attached to the running app"""
    return current_app.extensions['db_manager']
