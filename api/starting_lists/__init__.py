from flask import Blueprint
import logging


# mounted under /events/<event_id>/starting-list; every view receives event_id
starting_lists_bp = Blueprint('starting_lists', __name__)

logger = logging.getLogger(__name__)

# roles that run the competition floor
OFFICIATING_ROLES = ['admin', 'official']

from . import (
    get_starting_lists,
    get_starting_list,
    create_starting_list,
    update_starting_list,
    delete_starting_list,
    add_participant,
    remove_participant,
    update_results,
    update_status,
)

__all__ = ['starting_lists_bp']
