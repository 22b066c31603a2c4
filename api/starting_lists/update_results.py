from database import get_db_manager
from schemas import ParticipantResults
from utils.decorators import token_required, role_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import starting_lists_bp, OFFICIATING_ROLES


@starting_lists_bp.route('/<int:list_id>/results', methods=['PUT'])
@token_required
@role_required(OFFICIATING_ROLES)
@validate_body(ParticipantResults)
@log_action('Record result')
@handle_db_errors
def update_results(event_id, list_id, body):
    """Record final time and/or position; omitted values are kept"""
    participant = get_db_manager().update_participant_results(
        event_id, list_id, body.participant_id,
        final_time=body.final_time,
        position=body.position,
    )
    return api_response(data=participant, message='Results updated successfully')
