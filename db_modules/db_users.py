import logging
from datetime import datetime

from sqlalchemy import func, or_, select

from models import Club, Official, User, UserRole
from utils.errors import (
    AuthenticationError,
    BusinessRuleError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    field_error,
)
from utils.helpers import parse_bool
from utils.security import generate_password_hash, verify_password


logger = logging.getLogger(__name__)


def _cell(value):
    if value is None:
        return None
    return str(value).strip() or None


class UserDbMixin:
    """User and account database operations mixin.

    Requires the host class to provide:
    - self.session_scope(): transactional session context manager
    """

    # ==================== accounts ====================

    def _find_user_conflict(self, session, email=None, username=None, exclude_id=None):
        clauses = []
        if email:
            clauses.append(User.email == email)
        if username:
            clauses.append(User.username == username)
        if not clauses:
            return None
        query = select(User).where(or_(*clauses))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        return session.scalars(query.limit(1)).first()

    def _create_user_with_profile(self, session, username, email, password_hash, role,
                                  is_active=True):
        """Insert a user and the role's profile (club or official) in the caller's transaction"""
        user = User(
            username=username,
            email=email,
            password=password_hash,
            role=role,
            is_active=is_active,
        )
        session.add(user)
        session.flush()

        # username doubles as the default profile name
        if role == UserRole.CLUB:
            session.add(Club(user_id=user.id, name=username))
        elif role == UserRole.OFFICIAL:
            session.add(Official(user_id=user.id, name=username))
        session.flush()
        return user

    def register_user(self, email, username, password, role=UserRole.CLUB):
        """Create a user plus its profile; conflict when email or username is taken"""
        with self.session_scope() as session:
            if self._find_user_conflict(session, email=email, username=username):
                raise ConflictError('Email or username already in use')

            user = self._create_user_with_profile(
                session, username, email, generate_password_hash(password), role
            )
            logger.info("User registered: %s (%s)", username, role.value)
            return user.to_dict(include_profile=True)

    def authenticate_user(self, identity, password):
        """Verify a credential and record the login.

        Check order: unknown identity, deactivated account, wrong password.
        """
        with self.session_scope() as session:
            user = session.scalars(
                select(User).where(or_(User.email == identity, User.username == identity)).limit(1)
            ).first()

            if not user:
                logger.warning("Login failed, unknown account: %s", identity)
                raise AuthenticationError('Invalid credentials')

            if not user.is_active:
                logger.warning("Login refused, account deactivated: %s", identity)
                raise ForbiddenError('Account is deactivated')

            if not verify_password(password, user.password):
                logger.warning("Login failed, wrong password: %s", identity)
                raise AuthenticationError('Invalid credentials')

            user.last_login = datetime.now()
            session.flush()
            return user.to_dict(include_profile=True)

    # ==================== user administration ====================

    def get_user(self, user_id, include_profile=True):
        with self.session_scope() as session:
            user = session.get(User, user_id)
            if not user:
                raise NotFoundError('User not found')
            return user.to_dict(include_profile=include_profile)

    def get_user_club_id(self, user_id):
        """Id of the (non-deleted) club owned by a user, or None"""
        with self.session_scope() as session:
            return session.scalar(
                select(Club.id).where(Club.user_id == user_id, Club.deleted_at.is_(None))
            )

    def list_users(self, page, per_page):
        with self.session_scope() as session:
            total = session.scalar(select(func.count(User.id)))
            users = session.scalars(
                select(User).order_by(User.id).offset((page - 1) * per_page).limit(per_page)
            ).all()
            return [u.to_dict() for u in users], total

    def create_user(self, username, email, password, role, is_active=True):
        with self.session_scope() as session:
            if self._find_user_conflict(session, email=email, username=username):
                raise ConflictError('Email or username already in use')
            user = self._create_user_with_profile(
                session, username, email, generate_password_hash(password), role, is_active
            )
            return user.to_dict(include_profile=True)

    def update_user(self, user_id, changes):
        """Update username/email/role/is_active/password"""
        with self.session_scope() as session:
            user = session.get(User, user_id)
            if not user:
                raise NotFoundError('User not found')

            if self._find_user_conflict(session, email=changes.get('email'),
                                        username=changes.get('username'), exclude_id=user_id):
                raise ConflictError('Email or username already in use')

            if changes.get('role') is not None and changes['role'] != user.role:
                self._change_role(session, user, changes['role'])

            for field in ('username', 'email', 'is_active'):
                if changes.get(field) is not None:
                    setattr(user, field, changes[field])
            if changes.get('password'):
                user.password = generate_password_hash(changes['password'])

            session.flush()
            return user.to_dict(include_profile=True)

    def _change_role(self, session, user, role):
        """Switch role and keep the profile in line with it.

        A club owner keeps the club role; the club's members, entries and
        invoices hang off that profile.
        """
        if user.club is not None and role != UserRole.CLUB:
            raise BusinessRuleError('User owns a club profile and cannot change role')

        if user.official is not None and role != UserRole.OFFICIAL:
            session.delete(user.official)
        if role == UserRole.CLUB and user.club is None:
            session.add(Club(user_id=user.id, name=user.username))
        elif role == UserRole.OFFICIAL and user.official is None:
            session.add(Official(user_id=user.id, name=user.username))

        logger.info("User %s role %s -> %s", user.id, user.role.value, role.value)
        user.role = role
        session.flush()
        session.expire(user, ['club', 'official'])

    def delete_user(self, user_id):
        with self.session_scope() as session:
            user = session.get(User, user_id)
            if not user:
                raise NotFoundError('User not found')
            if user.club is not None:
                raise BusinessRuleError('User owns a club profile and cannot be deleted')
            session.delete(user)
            logger.info("User %s deleted", user_id)

    # ==================== bulk import ====================

    def bulk_create_users(self, rows):
        """Insert every spreadsheet row or none of them.

        All rows are validated first; any row error raises ValidationError
        carrying the full per-row error list.
        """
        errors = []
        seen_usernames = set()
        seen_emails = set()
        prepared = []

        for index, row in enumerate(rows):
            row_no = index + 2  # spreadsheet row (header is row 1)
            prefix = f'rows[{row_no}]'
            username = _cell(row.get('username'))
            email = _cell(row.get('email'))
            password = _cell(row.get('password'))
            role_value = row.get('role') or UserRole.CLUB.value

            row_errors = []
            if not username:
                row_errors.append(field_error(f'{prefix}.username', f'Row {row_no}: username is required'))
            if not email:
                row_errors.append(field_error(f'{prefix}.email', f'Row {row_no}: email is required'))
            if not password:
                row_errors.append(field_error(f'{prefix}.password', f'Row {row_no}: password is required'))
            try:
                role = UserRole(str(role_value).strip().lower())
            except ValueError:
                role = None
                row_errors.append(field_error(f'{prefix}.role', f'Row {row_no}: invalid role "{role_value}"'))

            if username and username in seen_usernames:
                row_errors.append(field_error(f'{prefix}.username', f'Row {row_no}: duplicate username in file'))
            if email and email in seen_emails:
                row_errors.append(field_error(f'{prefix}.email', f'Row {row_no}: duplicate email in file'))
            seen_usernames.add(username)
            seen_emails.add(email)

            errors.extend(row_errors)
            if not row_errors:
                prepared.append((row_no, username, email, password, role, parse_bool(row.get('is_active'))))

        if not rows:
            raise ValidationError('No data found in the Excel file')

        with self.session_scope() as session:
            for row_no, username, email, _, _, _ in prepared:
                if self._find_user_conflict(session, email=email, username=username):
                    errors.append(field_error(f'rows[{row_no}]',
                                              f'Row {row_no}: email or username already in use'))

            if errors:
                raise ValidationError('Bulk import rejected, no users were created', errors)

            created = []
            for _, username, email, password, role, is_active in prepared:
                user = self._create_user_with_profile(
                    session, username, email, generate_password_hash(password), role, is_active
                )
                created.append(user.to_dict())

            logger.info("Bulk import created %d users", len(created))
            return created
