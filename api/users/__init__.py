from flask import Blueprint
import logging


users_bp = Blueprint('users', __name__)

logger = logging.getLogger(__name__)

# admin-only user administration, one route per module
from . import (
    get_users,
    get_user,
    create_user,
    update_user,
    delete_user,
    bulk_import,
)

__all__ = ['users_bp']
