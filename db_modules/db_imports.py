import logging

from sqlalchemy import func, select

from models import (
    ClubMember,
    ClubMemberCategory,
    Event,
    EventRegistration,
    Gender,
    RegistrationStatus,
    StartingList,
    StartingListParticipant,
    StartingListStatus,
)
from utils.errors import BusinessRuleError, NotFoundError, ValidationError, field_error
from utils.helpers import parse_date, parse_datetime


logger = logging.getLogger(__name__)

DEFAULT_LIST_CATEGORY = 'general'


def _text(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _lane(value):
    if value is None or value == '':
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


class ImportDbMixin:
    """Club roster spreadsheet import"""

    def _upsert_member(self, session, club_id, row, category):
        name = _text(row.get('name'))
        date_of_birth = parse_date(row.get('date_of_birth'))

        member = session.scalars(
            select(ClubMember).where(
                ClubMember.club_id == club_id,
                ClubMember.name == name,
                ClubMember.date_of_birth.is_(None) if date_of_birth is None
                else ClubMember.date_of_birth == date_of_birth,
            ).limit(1)
        ).first()
        if not member:
            member = ClubMember(club_id=club_id, name=name, date_of_birth=date_of_birth)
            session.add(member)

        member.email = _text(row.get('email'))
        member.phone = _text(row.get('phone'))
        member.emergency_contact = _text(row.get('emergency_contact'))
        member.category = category
        member.active = True
        session.flush()
        return member

    def _find_or_create_list(self, session, event_id, row):
        category = _text(row.get('category')) or DEFAULT_LIST_CATEGORY
        age_group = _text(row.get('age_group'))
        gender = Gender.FEMALE if (_text(row.get('gender')) or '').lower() == 'female' else Gender.MALE

        starting_list = session.scalars(
            select(StartingList).where(
                StartingList.event_id == event_id,
                StartingList.category == category,
                StartingList.age_group.is_(None) if age_group is None
                else StartingList.age_group == age_group,
                StartingList.gender == gender,
            ).limit(1).with_for_update()
        ).first()
        if not starting_list:
            starting_list = StartingList(event_id=event_id, category=category,
                                         age_group=age_group, gender=gender,
                                         status=StartingListStatus.SCHEDULED)
            session.add(starting_list)
            session.flush()
        return starting_list

    def import_club_roster(self, event_id, club_id, compe_type, rows):
        """Import a club roster for an event; returns the number of rows processed.

        Each row upserts a member, finds or creates its starting list and
        enters the member. Any failing row aborts the whole import.
        """
        if not rows:
            raise ValidationError('Excel file is empty or has invalid format')

        category = ClubMemberCategory(compe_type)

        with self.session_scope() as session:
            if not session.get(Event, event_id):
                raise NotFoundError('Event not found')
            if not self._get_active_club(session, club_id):
                raise NotFoundError('Club not found')

            registration = session.scalar(
                select(EventRegistration).where(EventRegistration.event_id == event_id,
                                                EventRegistration.club_id == club_id)
            )
            if not registration:
                session.add(EventRegistration(event_id=event_id, club_id=club_id,
                                              status=RegistrationStatus.PENDING))

            processed = 0
            for index, row in enumerate(rows):
                row_no = index + 2
                if not _text(row.get('name')):
                    raise ValidationError('Import aborted, no rows were saved', [
                        field_error(f'rows[{row_no}].name', f'Row {row_no}: name is required')
                    ])

                member = self._upsert_member(session, club_id, row, category)
                starting_list = self._find_or_create_list(session, event_id, row)
                seed_time = parse_datetime(row.get('seed_time'))
                if seed_time is None and _text(row.get('seed_time')):
                    raise ValidationError('Import aborted, no rows were saved', [
                        field_error(f'rows[{row_no}].seed_time',
                                    f'Row {row_no}: unreadable seed time "{row.get("seed_time")}"')
                    ])
                lane_number = _lane(row.get('lane_number'))

                participant = session.scalar(
                    select(StartingListParticipant).where(
                        StartingListParticipant.starting_list_id == starting_list.id,
                        StartingListParticipant.member_id == member.id,
                    )
                )
                if participant:
                    participant.seed_time = seed_time
                    participant.lane_number = lane_number
                else:
                    count = session.scalar(
                        select(func.count(StartingListParticipant.id))
                        .where(StartingListParticipant.starting_list_id == starting_list.id)
                    )
                    if starting_list.max_participants and count >= starting_list.max_participants:
                        raise BusinessRuleError(
                            f'Row {row_no}: starting list {starting_list.id} is full '
                            f'({starting_list.max_participants} participants)'
                        )
                    session.add(StartingListParticipant(
                        starting_list_id=starting_list.id,
                        member_id=member.id,
                        seed_time=seed_time,
                        lane_number=lane_number,
                    ))
                session.flush()
                processed += 1

            logger.info("Roster import for club %s / event %s: %d rows", club_id, event_id, processed)
            return processed
