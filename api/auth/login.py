from database import get_db_manager
from schemas import LoginRequest
from utils.decorators import validate_body, log_action, handle_db_errors
from utils.response import api_response
from utils.security import create_access_token

from . import auth_bp, logger


@auth_bp.route('/login', methods=['POST'])
@validate_body(LoginRequest)
@log_action('Login')
@handle_db_errors
def login(body):
    """Verify credentials and issue a bearer token"""
    user = get_db_manager().authenticate_user(body.email_or_username, body.password)
    token = create_access_token(user['id'], user['role'])

    logger.info("User %s logged in", user['username'])
    return api_response(data={'user': user, 'token': token}, message='Login successful')
