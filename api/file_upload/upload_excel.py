from flask import request
from pydantic import ValidationError as PydanticValidationError

from database import get_db_manager
from schemas import RosterUploadForm
from utils.decorators import (
    token_required,
    role_required,
    assert_club_access,
    format_validation_errors,
    log_action,
    handle_db_errors,
)
from utils.errors import ValidationError
from utils.excel_handler import excel_handler, temporary_upload
from utils.response import api_response

from . import file_upload_bp, logger


@file_upload_bp.route('/upload-excel', methods=['POST'])
@token_required
@role_required(['admin', 'club'])
@log_action('Import club roster')
@handle_db_errors
def upload_excel():
    """Import a club roster spreadsheet into an event

    Form fields: file, eventId, clubId, compeType (achieving|non_achieving).
    The whole file is imported in one transaction; the upload is removed
    afterwards in every case.
    """
    try:
        form = RosterUploadForm.model_validate(request.form.to_dict())
    except PydanticValidationError as exc:
        raise ValidationError('Event ID, Club ID, and Competition type are required',
                              format_validation_errors(exc))

    assert_club_access(form.club_id)

    with temporary_upload(request.files.get('file')) as path:
        rows = excel_handler.read_rows(path)
        processed = get_db_manager().import_club_roster(
            form.event_id, form.club_id, form.compe_type.value, rows
        )

    logger.info("Roster upload for club %s: %d rows", form.club_id, processed)
    return api_response(data=processed, message='Data imported successfully')
