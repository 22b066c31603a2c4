import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from models import (
    ClubMember,
    Event,
    InvoiceItem,
    StartingList,
    StartingListParticipant,
    StartingListStatus,
)
from utils.errors import BusinessRuleError, ConflictError, NotFoundError


logger = logging.getLogger(__name__)

STARTING_LIST_FIELDS = ('category', 'age_group', 'gender', 'max_participants', 'start_time')


class StartingListDbMixin:
    """Starting list and participant database operations mixin"""

    def _get_starting_list(self, session, event_id, list_id, lock=False):
        query = select(StartingList).where(StartingList.id == list_id,
                                           StartingList.event_id == event_id)
        if lock:
            query = query.with_for_update()
        starting_list = session.scalars(query).first()
        if not starting_list:
            raise NotFoundError('Starting list not found')
        return starting_list

    @staticmethod
    def _apply_status(starting_list, new_status):
        if not starting_list.can_transition_to(new_status):
            raise BusinessRuleError(
                f'Invalid status transition: {starting_list.status.value} -> {new_status.value}'
            )
        starting_list.status = new_status

    @staticmethod
    def _participant_count(session, list_id):
        return session.scalar(
            select(func.count(StartingListParticipant.id))
            .where(StartingListParticipant.starting_list_id == list_id)
        )

    # ==================== starting lists ====================

    def list_starting_lists(self, event_id):
        with self.session_scope() as session:
            if not session.get(Event, event_id):
                raise NotFoundError('Event not found')
            lists = session.scalars(
                select(StartingList)
                .options(selectinload(StartingList.participants)
                         .selectinload(StartingListParticipant.member))
                .where(StartingList.event_id == event_id)
                .order_by(StartingList.id)
            ).all()
            return [sl.to_dict(include_participants=True) for sl in lists]

    def get_starting_list(self, event_id, list_id):
        with self.session_scope() as session:
            starting_list = self._get_starting_list(session, event_id, list_id)
            return starting_list.to_dict(include_participants=True, include_event=True)

    def create_starting_list(self, event_id, fields):
        with self.session_scope() as session:
            if not session.get(Event, event_id):
                raise NotFoundError('Event not found')
            starting_list = StartingList(
                event_id=event_id,
                status=StartingListStatus.SCHEDULED,
                **{f: fields.get(f) for f in STARTING_LIST_FIELDS},
            )
            session.add(starting_list)
            session.flush()
            logger.info("Starting list %s created for event %s", starting_list.id, event_id)
            return starting_list.to_dict()

    def update_starting_list(self, event_id, list_id, changes):
        """Partial update; a status change must follow the transition table"""
        with self.session_scope() as session:
            starting_list = self._get_starting_list(session, event_id, list_id, lock=True)

            if changes.get('max_participants') is not None:
                current = self._participant_count(session, list_id)
                if changes['max_participants'] < current:
                    raise BusinessRuleError(
                        f'Capacity cannot be lower than the current participant count ({current})'
                    )

            for field in STARTING_LIST_FIELDS:
                if field in changes and (changes[field] is not None or field != 'category'):
                    setattr(starting_list, field, changes[field])

            if changes.get('status') is not None:
                self._apply_status(starting_list, changes['status'])

            session.flush()
            return starting_list.to_dict()

    def update_starting_list_status(self, event_id, list_id, new_status):
        with self.session_scope() as session:
            starting_list = self._get_starting_list(session, event_id, list_id, lock=True)
            self._apply_status(starting_list, new_status)
            session.flush()
            logger.info("Starting list %s status -> %s", list_id, new_status.value)
            return starting_list.to_dict()

    def delete_starting_list(self, event_id, list_id):
        """Blocked while invoice items reference the list; participants go first"""
        with self.session_scope() as session:
            starting_list = self._get_starting_list(session, event_id, list_id)

            linked = session.scalar(
                select(InvoiceItem.id).where(InvoiceItem.starting_list_id == list_id).limit(1)
            )
            if linked:
                raise BusinessRuleError('Cannot delete starting list as it has linked invoice items')

            session.delete(starting_list)

    # ==================== participants ====================

    def add_participant(self, event_id, list_id, member_id, lane_number=None, seed_time=None):
        """Enter a member into a starting list.

        The list row is locked for the capacity check and the
        (starting_list_id, member_id) unique key rejects concurrent duplicates.
        """
        try:
            with self.session_scope() as session:
                starting_list = self._get_starting_list(session, event_id, list_id, lock=True)

                count = self._participant_count(session, list_id)
                if starting_list.max_participants and count >= starting_list.max_participants:
                    raise BusinessRuleError(
                        f'Maximum number of participants ({starting_list.max_participants}) already reached'
                    )

                member = session.get(ClubMember, member_id)
                if not member:
                    raise NotFoundError('Club member not found')

                existing = session.scalar(
                    select(StartingListParticipant.id).where(
                        StartingListParticipant.starting_list_id == list_id,
                        StartingListParticipant.member_id == member_id,
                    )
                )
                if existing:
                    raise ConflictError('Member is already in this starting list')

                participant = StartingListParticipant(
                    starting_list_id=list_id,
                    member_id=member_id,
                    lane_number=lane_number,
                    seed_time=seed_time,
                )
                session.add(participant)
                session.flush()
                session.refresh(participant)
                return participant.to_dict()
        except IntegrityError:
            logger.warning("Duplicate participant insert rejected: list=%s member=%s",
                           list_id, member_id)
            raise ConflictError('Member is already in this starting list')

    def remove_participant(self, event_id, list_id, participant_id):
        """Blocked while an invoice item bills this member within this list"""
        with self.session_scope() as session:
            self._get_starting_list(session, event_id, list_id)
            participant = session.scalars(
                select(StartingListParticipant).where(
                    StartingListParticipant.id == participant_id,
                    StartingListParticipant.starting_list_id == list_id,
                )
            ).first()
            if not participant:
                raise NotFoundError('Participant not found in this starting list')

            linked = session.scalar(
                select(InvoiceItem.id).where(
                    InvoiceItem.starting_list_id == list_id,
                    InvoiceItem.member_id == participant.member_id,
                ).limit(1)
            )
            if linked:
                raise BusinessRuleError('Cannot remove participant as they have linked invoice items')

            session.delete(participant)

    def update_participant_results(self, event_id, list_id, participant_id,
                                   final_time=None, position=None):
        """Set final time/position; a missing value keeps the stored one"""
        with self.session_scope() as session:
            self._get_starting_list(session, event_id, list_id)
            participant = session.scalars(
                select(StartingListParticipant).where(
                    StartingListParticipant.id == participant_id,
                    StartingListParticipant.starting_list_id == list_id,
                )
            ).first()
            if not participant:
                raise NotFoundError('Participant not found in this starting list')

            if final_time is not None:
                participant.final_time = final_time
            if position is not None:
                participant.position = position

            session.flush()
            return participant.to_dict()
