from database import get_db_manager
from utils.decorators import token_required, handle_db_errors
from utils.response import api_response

from . import clubs_bp


@clubs_bp.route('/<int:club_id>', methods=['GET'])
@token_required
@handle_db_errors
def get_club(club_id):
    return api_response(data=get_db_manager().get_club(club_id))
