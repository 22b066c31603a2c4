from database import get_db_manager
from schemas import EventCreate
from utils.decorators import token_required, admin_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import events_bp


@events_bp.route('', methods=['POST'])
@token_required
@admin_required
@validate_body(EventCreate)
@log_action('Create event')
@handle_db_errors
def create_event(body):
    """Create an event; endDate after startDate, registrationDeadline before startDate"""
    event = get_db_manager().create_event(body.model_dump())
    return api_response(data=event, code=201, message='Event created successfully')
