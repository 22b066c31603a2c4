from database import get_db_manager
from schemas import EventQuery
from utils.decorators import token_required, validate_query, log_action, handle_db_errors
from utils.helpers import get_pagination_args
from utils.response import api_response

from . import events_bp


@events_bp.route('', methods=['GET'])
@token_required
@validate_query(EventQuery)
@log_action('List events')
@handle_db_errors
def get_events(query):
    """Events, newest first, optionally filtered by status"""
    page, per_page = get_pagination_args('perPage')
    events, total = get_db_manager().list_events(page, per_page, status=query.status)
    return api_response(paginated_data=events, page=page, per_page=per_page, total=total)
