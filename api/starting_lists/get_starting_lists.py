from database import get_db_manager
from utils.decorators import token_required, handle_db_errors
from utils.response import api_response

from . import starting_lists_bp


@starting_lists_bp.route('', methods=['GET'])
@token_required
@handle_db_errors
def get_starting_lists(event_id):
    """All starting lists of an event with their participants"""
    return api_response(data=get_db_manager().list_starting_lists(event_id))
