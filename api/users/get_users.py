from database import get_db_manager
from utils.decorators import token_required, admin_required, log_action, handle_db_errors
from utils.helpers import get_pagination_args
from utils.response import api_response

from . import users_bp


@users_bp.route('', methods=['GET'])
@token_required
@admin_required
@log_action('List users')
@handle_db_errors
def get_users():
    page, per_page = get_pagination_args('perPage')
    users, total = get_db_manager().list_users(page, per_page)
    return api_response(paginated_data=users, page=page, per_page=per_page, total=total)
