from database import get_db_manager
from utils.decorators import token_required, handle_db_errors
from utils.response import api_response

from . import starting_lists_bp


@starting_lists_bp.route('/<int:list_id>', methods=['GET'])
@token_required
@handle_db_errors
def get_starting_list(event_id, list_id):
    return api_response(data=get_db_manager().get_starting_list(event_id, list_id))
