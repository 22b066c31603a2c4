#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Akuatik admin backend - response envelope
"""

from flask import jsonify


def api_response(data=None, code=200, message='Your request is successful',
                 paginated_data=None, page=1, per_page=10, total=0):
    """Success envelope.

    ``data`` is included when not None; passing ``paginated_data`` switches to
    the paginated shape (paginatedData/page/perPage/total).
    """
    body = {
        'responseCode': code,
        'message': message,
    }
    if data is not None:
        body['data'] = data
    if paginated_data is not None:
        body['paginatedData'] = paginated_data
        body['page'] = page
        body['perPage'] = per_page
        body['total'] = total
    return jsonify(body), code


def api_error(code, message, errors=None):
    """Error envelope"""
    body = {
        'responseCode': code,
        'message': message,
    }
    if errors is not None:
        body['errors'] = errors
    return jsonify(body), code
