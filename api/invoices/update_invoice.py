from database import get_db_manager
from schemas import InvoiceUpdate
from utils.decorators import token_required, admin_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import invoices_bp


@invoices_bp.route('/<int:invoice_id>', methods=['PUT'])
@token_required
@admin_required
@validate_body(InvoiceUpdate)
@log_action('Update invoice')
@handle_db_errors
def update_invoice(club_id, invoice_id, body):
    """Status and payment details only"""
    invoice = get_db_manager().update_invoice(club_id, invoice_id, body.model_dump(exclude_unset=True))
    return api_response(data=invoice, message='Invoice updated successfully')
