from flask import Blueprint
import logging


# unauthenticated kejurkab self-registration
public_bp = Blueprint('public', __name__)

logger = logging.getLogger(__name__)

from . import (
    register_kejurkab,
    get_registration,
    get_invoice,
    update_invoice_status,
)

__all__ = ['public_bp']
