from flask import request

from database import get_db_manager
from utils.decorators import token_required, log_action, handle_db_errors
from utils.helpers import get_pagination_args
from utils.response import api_response

from . import clubs_bp


@clubs_bp.route('', methods=['GET'])
@token_required
@log_action('List clubs')
@handle_db_errors
def get_clubs():
    """Non-deleted clubs, searchable by name or email"""
    page, per_page = get_pagination_args('limit')
    search = (request.args.get('search') or '').strip()

    clubs, total = get_db_manager().list_clubs(page, per_page, search)
    return api_response(paginated_data=clubs, page=page, per_page=per_page, total=total)
