import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from models import PublicInvoice, PublicInvoiceStatus, PublicKejurkab
from utils.errors import ConflictError, NotFoundError


logger = logging.getLogger(__name__)


class PublicRegistrationDbMixin:
    """Public kejurkab self-registration mixin"""

    def register_kejurkab(self, registrant_name, event_name, category, email, phone):
        """Create the invoice, then the registration pointing at it, in one transaction.

        A concurrent duplicate that slips past the pre-check fails on the
        unique email/phone keys and is reported the same way.
        """
        try:
            with self.session_scope() as session:
                taken = session.scalar(
                    select(PublicKejurkab.registration_number)
                    .where(or_(PublicKejurkab.email == email, PublicKejurkab.phone == phone))
                    .limit(1)
                )
                if taken:
                    raise ConflictError('Email or phone number already registered')

                invoice = PublicInvoice(billed_to=registrant_name,
                                        status=PublicInvoiceStatus.PENDING)
                session.add(invoice)
                session.flush()

                registration = PublicKejurkab(
                    invoice_number=invoice.invoice_number,
                    registrant_name=registrant_name,
                    event_name=event_name,
                    category=category,
                    email=email,
                    phone=phone,
                )
                session.add(registration)
                session.flush()
                logger.info("Kejurkab registration %s (invoice %s)",
                            registration.registration_number, invoice.invoice_number)
                return registration.to_dict(include_invoice=True)
        except IntegrityError:
            logger.warning("Concurrent kejurkab registration rejected for %s", email)
            raise ConflictError('Email or phone number already registered')

    def get_kejurkab(self, registration_number):
        with self.session_scope() as session:
            registration = session.get(PublicKejurkab, registration_number)
            if not registration:
                raise NotFoundError('Registration not found')
            return registration.to_dict(include_invoice=True)

    def get_public_invoice(self, invoice_number):
        with self.session_scope() as session:
            invoice = session.get(PublicInvoice, invoice_number)
            if not invoice:
                raise NotFoundError('Invoice not found')
            return invoice.to_dict(include_registration=True)

    def update_public_invoice_status(self, invoice_number, status):
        with self.session_scope() as session:
            invoice = session.get(PublicInvoice, invoice_number)
            if not invoice:
                raise NotFoundError('Invoice not found')
            invoice.status = status
            session.flush()
            logger.info("Public invoice %s -> %s", invoice_number, status.value)
            return invoice.to_dict()
