from database import get_db_manager
from utils.decorators import token_required, admin_required, log_action, handle_db_errors
from utils.response import api_response

from . import events_bp


@events_bp.route('/<int:event_id>', methods=['DELETE'])
@token_required
@admin_required
@log_action('Delete event')
@handle_db_errors
def delete_event(event_id):
    get_db_manager().delete_event(event_id)
    return api_response(message='Event deleted successfully')
