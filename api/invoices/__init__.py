from flask import Blueprint
import logging


# mounted under /clubs/<club_id>/invoices; every view receives club_id
invoices_bp = Blueprint('invoices', __name__)

logger = logging.getLogger(__name__)

from . import (
    get_invoices,
    create_invoice,
    get_invoice,
    update_invoice,
    delete_invoice,
    get_invoice_items,
)

__all__ = ['invoices_bp']
