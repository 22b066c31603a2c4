import logging
from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import selectinload

from models import (
    Club,
    ClubMember,
    EventRegistration,
    Invoice,
    InvoiceStatus,
    RegistrationStatus,
)
from utils.errors import ConflictError, NotFoundError


logger = logging.getLogger(__name__)


class ClubDbMixin:
    """Club database operations mixin.

    Soft-deleted clubs (deleted_at set) are excluded from every query here.
    """

    def _get_active_club(self, session, club_id, lock=False):
        query = select(Club).where(Club.id == club_id, Club.deleted_at.is_(None))
        if lock:
            query = query.with_for_update()
        return session.scalars(query).first()

    def list_clubs(self, page, per_page, search=''):
        with self.session_scope() as session:
            conditions = [Club.deleted_at.is_(None)]
            if search:
                pattern = f'%{search.lower()}%'
                conditions.append(or_(func.lower(Club.name).like(pattern),
                                      func.lower(Club.email).like(pattern)))

            total = session.scalar(select(func.count(Club.id)).where(*conditions))

            member_count = (
                select(func.count(ClubMember.id))
                .where(ClubMember.club_id == Club.id)
                .correlate(Club)
                .scalar_subquery()
            )
            rows = session.execute(
                select(Club, member_count.label('member_count'))
                .options(selectinload(Club.user))
                .where(*conditions)
                .order_by(Club.created_at.desc(), Club.id.desc())
                .offset((page - 1) * per_page)
                .limit(per_page)
            ).all()

            clubs = []
            for club, count in rows:
                data = club.to_dict()
                data['user'] = club.user.to_dict() if club.user else None
                data['member_count'] = count
                clubs.append(data)
            return clubs, total

    def get_club(self, club_id):
        """Club with active members, registrations and non-canceled invoices"""
        with self.session_scope() as session:
            club = self._get_active_club(session, club_id)
            if not club:
                raise NotFoundError('Club not found')

            data = club.to_dict()
            data['user'] = club.user.to_dict() if club.user else None
            data['members'] = [
                {'id': m.id, 'name': m.name, 'category': m.category.value,
                 'date_of_birth': m.date_of_birth.isoformat() if m.date_of_birth else None}
                for m in club.members if m.active
            ]
            data['event_registrations'] = [r.to_dict() for r in club.event_registrations]
            invoices = [i for i in club.invoices
                        if i.status != InvoiceStatus.CANCELED and i.deleted_at is None]
            invoices.sort(key=lambda i: i.issue_date, reverse=True)
            data['invoices'] = [i.to_dict() for i in invoices]
            return data

    def update_club(self, club_id, changes):
        """Update name/email/phone/address; email and phone stay unique among live clubs"""
        with self.session_scope() as session:
            club = self._get_active_club(session, club_id)
            if not club:
                raise NotFoundError('Club not found')

            clauses = []
            if changes.get('email'):
                clauses.append(Club.email == changes['email'])
            if changes.get('phone'):
                clauses.append(Club.phone == changes['phone'])
            if clauses:
                taken = session.scalars(
                    select(Club.id).where(
                        Club.id != club_id,
                        Club.deleted_at.is_(None),
                        or_(*clauses),
                    ).limit(1)
                ).first()
                if taken:
                    raise ConflictError('Email or phone already in use')

            for field in ('name', 'email', 'phone', 'address'):
                if field in changes and changes[field] is not None:
                    setattr(club, field, changes[field])

            session.flush()
            return club.to_dict()

    # ==================== cascading soft delete ====================

    def _deactivate_club_members(self, session, club_id):
        session.execute(
            update(ClubMember).where(ClubMember.club_id == club_id).values(active=False)
        )

    def _cancel_club_registrations(self, session, club_id):
        session.execute(
            update(EventRegistration)
            .where(EventRegistration.club_id == club_id)
            .values(status=RegistrationStatus.CANCELED)
        )

    def _cancel_club_invoices(self, session, club_id):
        session.execute(
            update(Invoice).where(Invoice.club_id == club_id).values(status=InvoiceStatus.CANCELED)
        )

    def soft_delete_club(self, club_id):
        """Deactivate members, cancel registrations and invoices, then mark the club deleted.

        All four steps share one transaction.
        """
        with self.session_scope() as session:
            club = self._get_active_club(session, club_id, lock=True)
            if not club:
                raise NotFoundError('Club not found or already deleted')

            self._deactivate_club_members(session, club_id)
            self._cancel_club_registrations(session, club_id)
            self._cancel_club_invoices(session, club_id)

            club.deleted_at = datetime.now()
            club.active = False
            session.flush()
            logger.info("Club %s soft-deleted", club_id)
