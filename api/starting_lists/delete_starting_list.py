from database import get_db_manager
from utils.decorators import token_required, admin_required, log_action, handle_db_errors
from utils.response import api_response

from . import starting_lists_bp


@starting_lists_bp.route('/<int:list_id>', methods=['DELETE'])
@token_required
@admin_required
@log_action('Delete starting list')
@handle_db_errors
def delete_starting_list(event_id, list_id):
    get_db_manager().delete_starting_list(event_id, list_id)
    return api_response(message='Starting list deleted successfully')
