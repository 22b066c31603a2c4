from database import get_db_manager
from schemas import ClubUpdate
from utils.decorators import (
    token_required,
    club_access_required,
    validate_body,
    log_action,
    handle_db_errors,
)
from utils.response import api_response

from . import clubs_bp


@clubs_bp.route('/<int:club_id>', methods=['PUT'])
@token_required
@club_access_required
@validate_body(ClubUpdate)
@log_action('Update club')
@handle_db_errors
def update_club(club_id, body):
    """Update contact fields; email/phone must not belong to another club"""
    club = get_db_manager().update_club(club_id, body.model_dump(exclude_unset=True))
    return api_response(data=club, message='Club updated successfully')
