from database import get_db_manager
from schemas import ParticipantRemove
from utils.decorators import token_required, role_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import starting_lists_bp, OFFICIATING_ROLES


@starting_lists_bp.route('/<int:list_id>/participants', methods=['DELETE'])
@token_required
@role_required(OFFICIATING_ROLES)
@validate_body(ParticipantRemove)
@log_action('Remove participant')
@handle_db_errors
def remove_participant(event_id, list_id, body):
    get_db_manager().remove_participant(event_id, list_id, body.participant_id)
    return api_response(message='Participant removed successfully')
