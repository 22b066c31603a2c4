from database import get_db_manager
from utils.decorators import token_required, admin_required, log_action, handle_db_errors
from utils.response import api_response

from . import users_bp


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@token_required
@admin_required
@log_action('Delete user')
@handle_db_errors
def delete_user(user_id):
    get_db_manager().delete_user(user_id)
    return api_response(message='User deleted successfully')
