from database import get_db_manager
from schemas import UserUpdate
from utils.decorators import token_required, admin_required, validate_body, log_action, handle_db_errors
from utils.response import api_response

from . import users_bp


@users_bp.route('/<int:user_id>', methods=['PUT'])
@token_required
@admin_required
@validate_body(UserUpdate)
@log_action('Update user')
@handle_db_errors
def update_user(user_id, body):
    user = get_db_manager().update_user(user_id, body.model_dump(exclude_unset=True))
    return api_response(data=user, message='User updated successfully')
