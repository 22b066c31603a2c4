from database import get_db_manager
from utils.decorators import token_required, club_access_required, handle_db_errors
from utils.helpers import get_pagination_args
from utils.response import api_response

from . import invoices_bp


@invoices_bp.route('/<int:invoice_id>/items', methods=['GET'])
@token_required
@club_access_required
@handle_db_errors
def get_invoice_items(club_id, invoice_id):
    page, per_page = get_pagination_args('limit')
    items, total = get_db_manager().list_invoice_items(club_id, invoice_id, page, per_page)
    return api_response(paginated_data=items, page=page, per_page=per_page, total=total)
