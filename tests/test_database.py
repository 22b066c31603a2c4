import pytest
from sqlalchemy import func, select, text
from sqlalchemy.exc import OperationalError

from models import Club, User, UserRole


def test_failed_statement_leaves_no_query_timer(db_manager):
    with db_manager.engine.connect() as conn:
        with pytest.raises(OperationalError):
            conn.execute(text('SELECT * FROM no_such_table'))

        assert conn.info.get('query_start_time') == []

        conn.execute(text('SELECT 1'))
        assert conn.info['query_start_time'] == []


def test_session_scope_rolls_back_on_error(app, db_manager):
    with pytest.raises(RuntimeError):
        with db_manager.session_scope() as session:
            session.add(User(username='temp', email='temp@example.com', password='x',
                             role=UserRole.CLUB))
            session.flush()
            raise RuntimeError('abort')

    with db_manager.session_scope() as session:
        assert session.scalar(select(func.count(User.id)).where(User.username == 'temp')) == 0
        assert session.scalar(select(func.count(Club.id))) == 0
