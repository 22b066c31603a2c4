"""Database domain mixins package."""

from .db_users import UserDbMixin
from .db_clubs import ClubDbMixin
from .db_events import EventDbMixin
from .db_starting_lists import StartingListDbMixin
from .db_invoices import InvoiceDbMixin
from .db_public import PublicRegistrationDbMixin
from .db_imports import ImportDbMixin

__all__ = [
    "UserDbMixin",
    "ClubDbMixin",
    "EventDbMixin",
    "StartingListDbMixin",
    "InvoiceDbMixin",
    "PublicRegistrationDbMixin",
    "ImportDbMixin",
]
