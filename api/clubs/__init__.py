from flask import Blueprint
import logging


clubs_bp = Blueprint('clubs', __name__)

logger = logging.getLogger(__name__)

from . import (
    get_clubs,
    get_club,
    update_club,
    delete_club,
)

__all__ = ['clubs_bp']
