import logging

from sqlalchemy import func, select

from models import Event, EventStatus, Invoice, InvoiceItem, StartingList
from utils.errors import BusinessRuleError, NotFoundError, ValidationError, field_error


logger = logging.getLogger(__name__)

# request field -> column
EVENT_FIELDS = {
    'name': 'name',
    'description': 'description',
    'location': 'location',
    'start_date': 'start_date',
    'end_date': 'end_date',
    'registration_deadline': 'registration_deadline',
    'status': 'status',
    'max_participants': 'max_participants',
}

REQUIRED_EVENT_FIELDS = {'name', 'start_date', 'end_date', 'status'}


def event_date_errors(start_date, end_date, registration_deadline=None):
    """Date ordering checks reported per field (camelCase request paths)"""
    errors = []
    if start_date and end_date and end_date <= start_date:
        errors.append(field_error('endDate', 'endDate must be after startDate'))
    if registration_deadline and start_date and registration_deadline >= start_date:
        errors.append(field_error('registrationDeadline',
                                  'registrationDeadline must be before startDate'))
    return errors


class EventDbMixin:
    """Event database operations mixin"""

    def create_event(self, fields):
        errors = event_date_errors(fields['start_date'], fields['end_date'],
                                   fields.get('registration_deadline'))
        if errors:
            raise ValidationError('Validation failed', errors)

        with self.session_scope() as session:
            event = Event(**{column: fields[key] for key, column in EVENT_FIELDS.items()
                             if fields.get(key) is not None})
            if event.status is None:
                event.status = EventStatus.DRAFT
            session.add(event)
            session.flush()
            logger.info("Event created: %s (id=%s)", event.name, event.id)
            return event.to_dict()

    def list_events(self, page, per_page, status=None):
        with self.session_scope() as session:
            conditions = []
            if status:
                conditions.append(Event.status == status)
            total = session.scalar(select(func.count(Event.id)).where(*conditions))
            events = session.scalars(
                select(Event).where(*conditions)
                .order_by(Event.start_date.desc(), Event.id.desc())
                .offset((page - 1) * per_page).limit(per_page)
            ).all()
            return [e.to_dict() for e in events], total

    def get_event(self, event_id):
        with self.session_scope() as session:
            event = session.get(Event, event_id)
            if not event:
                raise NotFoundError('Event not found')
            return event.to_dict()

    def update_event(self, event_id, changes):
        """Partial update; date ordering is checked on the merged values"""
        with self.session_scope() as session:
            event = session.get(Event, event_id)
            if not event:
                raise NotFoundError('Event not found')

            merged = {key: getattr(event, column) for key, column in EVENT_FIELDS.items()}
            changes = {k: v for k, v in changes.items()
                       if k in EVENT_FIELDS and not (v is None and k in REQUIRED_EVENT_FIELDS)}
            merged.update(changes)

            errors = event_date_errors(merged['start_date'], merged['end_date'],
                                       merged['registration_deadline'])
            if errors:
                raise ValidationError('Validation failed', errors)

            for key, column in EVENT_FIELDS.items():
                if key in changes:
                    setattr(event, column, changes[key])

            session.flush()
            return event.to_dict()

    def delete_event(self, event_id):
        """Hard delete; blocked while invoices or invoice items reference the event"""
        with self.session_scope() as session:
            event = session.get(Event, event_id)
            if not event:
                raise NotFoundError('Event not found')

            has_invoice = session.scalar(
                select(Invoice.id).where(Invoice.event_id == event_id).limit(1)
            )
            has_item = session.scalar(
                select(InvoiceItem.id)
                .join(StartingList, InvoiceItem.starting_list_id == StartingList.id)
                .where(StartingList.event_id == event_id)
                .limit(1)
            )
            if has_invoice or has_item:
                raise BusinessRuleError('Cannot delete event as it has linked invoices')

            # starting lists, their participants and registrations cascade
            session.delete(event)
            logger.info("Event %s deleted", event_id)
