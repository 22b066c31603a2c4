from database import get_db_manager
from schemas import UserCreate
from utils.decorators import token_required, admin_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import users_bp, logger


@users_bp.route('', methods=['POST'])
@token_required
@admin_required
@validate_body(UserCreate)
@log_action('Create user')
@handle_db_errors
def create_user(body):
    """Create a user with its role profile"""
    user = get_db_manager().create_user(
        username=body.username,
        email=body.email,
        password=body.password,
        role=body.role,
        is_active=body.is_active,
    )
    logger.info("User %s created by admin", user['username'])
    return api_response(data=user, code=201, message='User created successfully')
