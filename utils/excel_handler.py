"""
Spreadsheet handling utilities
Read uploaded xls/xlsx/csv files into row dicts and generate import templates
"""

import logging
import os
from contextlib import contextmanager
from io import BytesIO

import pandas as pd
from flask import current_app

from utils.errors import ValidationError
from utils.helpers import generate_unique_filename

logger = logging.getLogger(__name__)

ROSTER_COLUMNS = ['name', 'date_of_birth', 'email', 'phone', 'emergency_contact',
                  'category', 'age_group', 'gender', 'seed_time', 'lane_number']
USER_COLUMNS = ['username', 'email', 'role', 'password', 'is_active']


def _normalize_column(name):
    return str(name).strip().lower().replace(' ', '_')


@contextmanager
def temporary_upload(file_storage, upload_folder=None):
    """Save an uploaded file under the upload folder and remove it on exit

    Yields the saved path. The file is deleted whether the body succeeds or
    raises.
    """
    if file_storage is None or not file_storage.filename:
        raise ValidationError('No file uploaded')

    allowed = current_app.config.get('ALLOWED_UPLOAD_MIMETYPES', ())
    if file_storage.mimetype not in allowed:
        raise ValidationError('Only Excel or CSV files are allowed')

    folder = upload_folder or current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    path = os.path.join(folder, generate_unique_filename(file_storage.filename))
    file_storage.save(path)
    logger.info("Upload saved: %s (%s)", path, file_storage.mimetype)
    try:
        yield path
    finally:
        if os.path.exists(path):
            os.remove(path)
            logger.debug("Upload removed: %s", path)


class ExcelHandler:
    def read_rows(self, path):
        """
        Read the first sheet (or the CSV) into a list of dicts

        Column names are lower-cased with spaces turned into underscores;
        empty cells become None.
        """
        try:
            if path.lower().endswith('.csv'):
                df = pd.read_csv(path, dtype=object)
            else:
                df = pd.read_excel(path, sheet_name=0, dtype=object)
        except ImportError:
            # reader engine (openpyxl for xlsx, xlrd for xls) not installed
            logger.exception("No spreadsheet reader available for %s", path)
            raise
        except Exception as e:
            logger.warning("Spreadsheet parse failed for %s: %s", path, e)
            raise ValidationError('Excel file is empty or has invalid format')

        df.columns = [_normalize_column(c) for c in df.columns]
        df = df.dropna(how='all')
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict(orient='records')

    def generate_template(self, columns, sample_rows, sheet_name='data'):
        """
        Build an xlsx template with a header row and example rows
        """
        df = pd.DataFrame(sample_rows, columns=columns)

        output = BytesIO()
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name=sheet_name, index=False)

            worksheet = writer.sheets[sheet_name]
            for index, column in enumerate(columns):
                letter = chr(ord('A') + index)
                worksheet.column_dimensions[letter].width = max(len(column) + 4, 16)

        output.seek(0)
        return output.getvalue()

    def generate_roster_template(self):
        return self.generate_template(ROSTER_COLUMNS, [
            ['Budi Santoso', '2010-05-14', 'budi@example.com', '081234567890', 'Ibu Santoso',
             '50m freestyle', '12-14', 'male', None, 3],
        ], sheet_name='roster')

    def generate_user_template(self):
        return self.generate_template(USER_COLUMNS, [
            ['club_tirta', 'tirta@example.com', 'club', 'change-me-123', True],
        ], sheet_name='users')


excel_handler = ExcelHandler()
