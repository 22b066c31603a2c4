from database import get_db_manager
from utils.decorators import handle_db_errors
from utils.response import api_response

from . import public_bp


@public_bp.route('/detail/invoice/<invoice_number>', methods=['GET'])
@handle_db_errors
def get_invoice(invoice_number):
    return api_response(data=get_db_manager().get_public_invoice(invoice_number))
