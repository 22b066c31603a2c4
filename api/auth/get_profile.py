from flask import g

from database import get_db_manager
from utils.decorators import token_required, handle_db_errors
from utils.response import api_response

from . import auth_bp


@auth_bp.route('/me', methods=['GET'])
@token_required
@handle_db_errors
def get_profile():
    user = get_db_manager().get_user(g.current_user['id'])
    return api_response(data=user)
