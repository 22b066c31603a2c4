from database import get_db_manager
from utils.decorators import token_required, admin_required, log_action, handle_db_errors
from utils.response import api_response

from . import clubs_bp, logger


@clubs_bp.route('/<int:club_id>', methods=['DELETE'])
@token_required
@admin_required
@log_action('Delete club')
@handle_db_errors
def delete_club(club_id):
    """Soft delete: members deactivated, registrations and invoices canceled"""
    get_db_manager().soft_delete_club(club_id)
    logger.info("Club %s deleted", club_id)
    return api_response(message='Club deleted successfully')
