from database import get_db_manager
from schemas import InvoiceCreate
from utils.decorators import token_required, admin_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import invoices_bp


@invoices_bp.route('', methods=['POST'])
@token_required
@admin_required
@validate_body(InvoiceCreate)
@log_action('Create invoice')
@handle_db_errors
def create_invoice(club_id, body):
    """Create an invoice with its items; the amount is the sum of the item totals"""
    fields = body.model_dump()
    invoice = get_db_manager().create_invoice(club_id, fields)
    return api_response(data=invoice, code=201, message='Invoice created successfully')
