from flask import send_file
from io import BytesIO

from utils.decorators import token_required, handle_db_errors
from utils.errors import NotFoundError
from utils.excel_handler import excel_handler

from . import file_upload_bp

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

TEMPLATES = {
    'roster': (excel_handler.generate_roster_template, 'roster_template.xlsx'),
    'users': (excel_handler.generate_user_template, 'users_template.xlsx'),
}


@file_upload_bp.route('/template/<kind>', methods=['GET'])
@token_required
@handle_db_errors
def download_template(kind):
    """Spreadsheet template for the roster or user import"""
    if kind not in TEMPLATES:
        raise NotFoundError('Unknown template')

    build, filename = TEMPLATES[kind]
    return send_file(
        BytesIO(build()),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=filename,
    )
