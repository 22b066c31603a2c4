from database import get_db_manager
from schemas import StartingListCreate
from utils.decorators import token_required, admin_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import starting_lists_bp


@starting_lists_bp.route('', methods=['POST'])
@token_required
@admin_required
@validate_body(StartingListCreate)
@log_action('Create starting list')
@handle_db_errors
def create_starting_list(event_id, body):
    starting_list = get_db_manager().create_starting_list(event_id, body.model_dump())
    return api_response(data=starting_list, code=201, message='Starting list created successfully')
