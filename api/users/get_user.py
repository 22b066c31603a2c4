from database import get_db_manager
from utils.decorators import token_required, admin_required, handle_db_errors
from utils.response import api_response

from . import users_bp


@users_bp.route('/<int:user_id>', methods=['GET'])
@token_required
@admin_required
@handle_db_errors
def get_user(user_id):
    return api_response(data=get_db_manager().get_user(user_id))
