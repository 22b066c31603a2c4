from database import get_db_manager
from schemas import StartingListUpdate
from utils.decorators import token_required, admin_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import starting_lists_bp


@starting_lists_bp.route('/<int:list_id>', methods=['PUT'])
@token_required
@admin_required
@validate_body(StartingListUpdate)
@log_action('Update starting list')
@handle_db_errors
def update_starting_list(event_id, list_id, body):
    """Partial update; a status change follows the same rules as the status route"""
    starting_list = get_db_manager().update_starting_list(
        event_id, list_id, body.model_dump(exclude_unset=True)
    )
    return api_response(data=starting_list, message='Starting list updated successfully')
