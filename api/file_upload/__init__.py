from flask import Blueprint
import logging


file_upload_bp = Blueprint('file_upload', __name__)

logger = logging.getLogger(__name__)

from . import (
    upload_excel,
    download_template,
)

__all__ = ['file_upload_bp']
