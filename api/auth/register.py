from database import get_db_manager
from schemas import RegisterRequest
from utils.decorators import validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import auth_bp


@auth_bp.route('/register', methods=['POST'])
@validate_body(RegisterRequest)
@log_action('Register account')
@handle_db_errors
def register(body):
    """Create an account plus its club/official profile"""
    user = get_db_manager().register_user(
        email=body.email,
        username=body.username,
        password=body.password,
        role=body.role,
    )
    return api_response(data=user, code=201, message='User registered successfully')
