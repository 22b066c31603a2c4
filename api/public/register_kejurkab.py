from database import get_db_manager
from schemas import PublicRegistration
from utils.decorators import validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import public_bp


@public_bp.route('/register', methods=['POST'])
@validate_body(PublicRegistration)
@log_action('Kejurkab registration')
@handle_db_errors
def register_kejurkab(body):
    """Register for the championship; one registration per email and per phone"""
    registration = get_db_manager().register_kejurkab(
        registrant_name=body.registrant_name,
        event_name=body.event_name,
        category=body.category,
        email=body.email,
        phone=body.phone,
    )
    return api_response(data=registration, code=201, message='Registration successful')
