from database import get_db_manager
from utils.decorators import token_required, handle_db_errors
from utils.response import api_response

from . import events_bp


@events_bp.route('/<int:event_id>', methods=['GET'])
@token_required
@handle_db_errors
def get_event(event_id):
    return api_response(data=get_db_manager().get_event(event_id))
