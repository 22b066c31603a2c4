from database import get_db_manager
from utils.decorators import token_required, club_access_required, handle_db_errors
from utils.response import api_response

from . import invoices_bp


@invoices_bp.route('/<int:invoice_id>', methods=['GET'])
@token_required
@club_access_required
@handle_db_errors
def get_invoice(club_id, invoice_id):
    return api_response(data=get_db_manager().get_invoice(club_id, invoice_id))
