from flask import request

from database import get_db_manager
from utils.decorators import token_required, admin_required, log_action, handle_db_errors
from utils.excel_handler import excel_handler, temporary_upload
from utils.response import api_response

from . import users_bp, logger


@users_bp.route('/bulk-import', methods=['POST'])
@token_required
@admin_required
@log_action('Bulk import users')
@handle_db_errors
def bulk_import():
    """Create users from a spreadsheet (username, email, role, password, is_active)

    Every row is validated before anything is written; one bad row rejects
    the whole file.
    """
    with temporary_upload(request.files.get('file')) as path:
        rows = excel_handler.read_rows(path)

    created = get_db_manager().bulk_create_users(rows)
    logger.info("Bulk import: %d users created", len(created))
    return api_response(data={'created': len(created), 'users': created}, code=201,
                        message='Users imported successfully')
