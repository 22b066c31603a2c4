from flask import Blueprint
import logging


events_bp = Blueprint('events', __name__)

logger = logging.getLogger(__name__)

# each route lives in its own module in this package
from . import (
    get_events,
    get_event,
    create_event,
    update_event,
    delete_event,
)

__all__ = ['events_bp']
