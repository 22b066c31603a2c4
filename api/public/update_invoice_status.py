from database import get_db_manager
from schemas import PublicInvoiceStatusUpdate
from utils.decorators import token_required, admin_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import public_bp


@public_bp.route('/invoice/<invoice_number>/status', methods=['PUT'])
@token_required
@admin_required
@validate_body(PublicInvoiceStatusUpdate)
@log_action('Update kejurkab invoice status')
@handle_db_errors
def update_invoice_status(invoice_number, body):
    invoice = get_db_manager().update_public_invoice_status(invoice_number, body.status)
    return api_response(data=invoice, message='Invoice status updated successfully')
