from database import get_db_manager
from schemas import InvoiceQuery
from utils.decorators import (
    token_required,
    club_access_required,
    validate_query,
    log_action,
    handle_db_errors,
)
from utils.response import api_response

from . import invoices_bp


@invoices_bp.route('', methods=['GET'])
@token_required
@club_access_required
@validate_query(InvoiceQuery)
@log_action('List invoices')
@handle_db_errors
def get_invoices(club_id, query):
    """Club invoices with search over reference number/notes and a status filter"""
    invoices, total = get_db_manager().list_invoices(
        club_id, query.page, query.limit, search=query.search, status=query.status
    )
    return api_response(paginated_data=invoices, page=query.page, per_page=query.limit, total=total)
