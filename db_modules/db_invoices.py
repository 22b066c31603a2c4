import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from models import (
    ClubMember,
    Event,
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    StartingList,
    StartingListParticipant,
)
from utils.errors import ConflictError, NotFoundError, ValidationError, field_error
from utils.helpers import generate_reference_number


logger = logging.getLogger(__name__)

INVOICE_UPDATE_FIELDS = ('status', 'payment_date', 'payment_method', 'notes')


def compute_invoice_amount(items):
    """Sum of quantity x unit_price, exact to the cent"""
    total = Decimal('0')
    for item in items:
        total += Decimal(item['quantity']) * Decimal(str(item['unit_price']))
    return total.quantize(Decimal('0.01'))


class InvoiceDbMixin:
    """Club invoice database operations mixin"""

    def _get_invoice(self, session, club_id, invoice_id):
        invoice = session.scalars(
            select(Invoice).where(
                Invoice.id == invoice_id,
                Invoice.club_id == club_id,
                Invoice.deleted_at.is_(None),
            )
        ).first()
        if not invoice:
            raise NotFoundError('Invoice not found')
        return invoice

    def create_invoice(self, club_id, fields):
        """Insert an invoice with its items.

        The amount is always derived from the items. Each item must bill a
        member of the invoiced club who is entered in a starting list of the
        invoiced event.
        """
        items = fields['items']
        reference_number = fields.get('reference_number') or generate_reference_number()
        try:
            with self.session_scope() as session:
                if not self._get_active_club(session, club_id):
                    raise NotFoundError('Club not found')
                if not session.get(Event, fields['event_id']):
                    raise NotFoundError('Event not found')
                if session.scalar(select(Invoice.id).where(Invoice.reference_number == reference_number)):
                    raise ConflictError('Reference number already in use')

                errors = self._check_invoice_items(session, club_id, fields['event_id'], items)
                if errors:
                    raise ValidationError('Validation failed', errors)

                invoice = Invoice(
                    club_id=club_id,
                    event_id=fields['event_id'],
                    reference_number=reference_number,
                    amount=compute_invoice_amount(items),
                    status=fields.get('status') or InvoiceStatus.DRAFT,
                    issue_date=fields.get('issue_date') or datetime.now(),
                    due_date=fields['due_date'],
                    payment_method=fields.get('payment_method'),
                    notes=fields.get('notes'),
                )
                for item in items:
                    unit_price = Decimal(str(item['unit_price']))
                    invoice.items.append(InvoiceItem(
                        starting_list_id=item['starting_list_id'],
                        member_id=item['member_id'],
                        description=item['description'],
                        quantity=item['quantity'],
                        unit_price=unit_price,
                        total_price=unit_price * item['quantity'],
                    ))
                session.add(invoice)
                session.flush()
                logger.info("Invoice %s created for club %s (amount=%s)",
                            invoice.reference_number, club_id, invoice.amount)
                return invoice.to_dict(include_items=True)
        except IntegrityError:
            logger.warning("Concurrent invoice with reference %s rejected", reference_number)
            raise ConflictError('Reference number already in use')

    def _check_invoice_items(self, session, club_id, event_id, items):
        """Field errors for items outside the club's entries in the event"""
        errors = []
        for index, item in enumerate(items):
            starting_list = session.get(StartingList, item['starting_list_id'])
            if not starting_list or starting_list.event_id != event_id:
                errors.append(field_error(f'items.{index}.starting_list_id',
                                          'Starting list does not belong to this event'))
                continue

            member = session.get(ClubMember, item['member_id'])
            if not member or member.club_id != club_id:
                errors.append(field_error(f'items.{index}.member_id',
                                          'Club member not found in this club'))
                continue

            entered = session.scalar(
                select(StartingListParticipant.id).where(
                    StartingListParticipant.starting_list_id == starting_list.id,
                    StartingListParticipant.member_id == member.id,
                )
            )
            if not entered:
                errors.append(field_error(f'items.{index}.member_id',
                                          'Member is not entered in this starting list'))
        return errors

    def list_invoices(self, club_id, page, per_page, search='', status=None):
        with self.session_scope() as session:
            if not self._get_active_club(session, club_id):
                raise NotFoundError('Club not found')

            conditions = [Invoice.club_id == club_id, Invoice.deleted_at.is_(None)]
            if search:
                pattern = f'%{search}%'
                conditions.append(or_(Invoice.reference_number.like(pattern),
                                      Invoice.notes.like(pattern)))
            if status:
                conditions.append(Invoice.status == status)

            total = session.scalar(select(func.count(Invoice.id)).where(*conditions))

            item_count = (
                select(func.count(InvoiceItem.id))
                .where(InvoiceItem.invoice_id == Invoice.id)
                .correlate(Invoice)
                .scalar_subquery()
            )
            rows = session.execute(
                select(Invoice, item_count.label('item_count'), Event.name.label('event_name'))
                .join(Event, Invoice.event_id == Event.id)
                .where(*conditions)
                .order_by(Invoice.issue_date.desc(), Invoice.id.desc())
                .offset((page - 1) * per_page)
                .limit(per_page)
            ).all()

            invoices = []
            for invoice, count, event_name in rows:
                data = invoice.to_dict()
                data['total_amount'] = data['amount']
                data['item_count'] = count
                data['event_name'] = event_name
                invoices.append(data)
            return invoices, total

    def get_invoice(self, club_id, invoice_id):
        with self.session_scope() as session:
            invoice = self._get_invoice(session, club_id, invoice_id)
            data = invoice.to_dict(include_items=True)
            data['club'] = invoice.club.to_dict()
            data['event'] = invoice.event.to_summary()
            return data

    def update_invoice(self, club_id, invoice_id, changes):
        """Only status and payment details may change after creation"""
        with self.session_scope() as session:
            invoice = self._get_invoice(session, club_id, invoice_id)
            for field in INVOICE_UPDATE_FIELDS:
                if changes.get(field) is not None:
                    setattr(invoice, field, changes[field])
            session.flush()
            return invoice.to_dict()

    def delete_invoice(self, club_id, invoice_id):
        with self.session_scope() as session:
            invoice = self._get_invoice(session, club_id, invoice_id)
            invoice.status = InvoiceStatus.CANCELED
            invoice.deleted_at = datetime.now()
            logger.info("Invoice %s canceled", invoice.reference_number)

    def list_invoice_items(self, club_id, invoice_id, page, per_page):
        with self.session_scope() as session:
            self._get_invoice(session, club_id, invoice_id)
            total = session.scalar(
                select(func.count(InvoiceItem.id)).where(InvoiceItem.invoice_id == invoice_id)
            )
            items = session.scalars(
                select(InvoiceItem)
                .options(selectinload(InvoiceItem.member),
                         selectinload(InvoiceItem.starting_list))
                .where(InvoiceItem.invoice_id == invoice_id)
                .order_by(InvoiceItem.id)
                .offset((page - 1) * per_page)
                .limit(per_page)
            ).all()
            return [item.to_dict() for item in items], total
