from database import get_db_manager
from schemas import StartingListStatusUpdate
from utils.decorators import token_required, role_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import starting_lists_bp, OFFICIATING_ROLES


@starting_lists_bp.route('/<int:list_id>/status', methods=['PUT'])
@token_required
@role_required(OFFICIATING_ROLES)
@validate_body(StartingListStatusUpdate)
@log_action('Change starting list status')
@handle_db_errors
def update_status(event_id, list_id, body):
    """scheduled -> in_progress -> completed; in_progress may fall back to scheduled"""
    starting_list = get_db_manager().update_starting_list_status(event_id, list_id, body.status)
    return api_response(data=starting_list, message='Status updated successfully')
