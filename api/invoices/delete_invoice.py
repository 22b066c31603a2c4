from database import get_db_manager
from utils.decorators import token_required, admin_required, log_action, handle_db_errors
from utils.response import api_response

from . import invoices_bp


@invoices_bp.route('/<int:invoice_id>', methods=['DELETE'])
@token_required
@admin_required
@log_action('Cancel invoice')
@handle_db_errors
def delete_invoice(club_id, invoice_id):
    get_db_manager().delete_invoice(club_id, invoice_id)
    return api_response(message='Invoice deleted successfully')
