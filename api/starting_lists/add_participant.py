from database import get_db_manager
from schemas import ParticipantAdd
from utils.decorators import token_required, role_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import starting_lists_bp, OFFICIATING_ROLES


@starting_lists_bp.route('/<int:list_id>/participants', methods=['POST'])
@token_required
@role_required(OFFICIATING_ROLES)
@validate_body(ParticipantAdd)
@log_action('Add participant')
@handle_db_errors
def add_participant(event_id, list_id, body):
    """Enter a club member; rejected at capacity or when already entered"""
    participant = get_db_manager().add_participant(
        event_id, list_id, body.member_id,
        lane_number=body.lane_number,
        seed_time=body.seed_time,
    )
    return api_response(data=participant, code=201, message='Participant added successfully')
