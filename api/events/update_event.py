from database import get_db_manager
from schemas import EventUpdate
from utils.decorators import token_required, admin_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import events_bp


@events_bp.route('/<int:event_id>', methods=['PUT', 'PATCH'])
@token_required
@admin_required
@validate_body(EventUpdate)
@log_action('Update event')
@handle_db_errors
def update_event(event_id, body):
    """Partial update; only the supplied fields change"""
    event = get_db_manager().update_event(event_id, body.model_dump(exclude_unset=True))
    return api_response(data=event, message='Event updated successfully')
