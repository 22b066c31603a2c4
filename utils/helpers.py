#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Akuatik admin backend - helper functions
"""

import os
import re
import uuid
from datetime import datetime, date, time, timezone

from flask import current_app, request

from utils.errors import ValidationError, field_error

PHONE_PATTERN = re.compile(r'^[+]?[(]?[0-9]{1,4}[)]?[-\s./0-9]*$')

# date carried by time-only values (race times), as strptime fills it in
TIME_ONLY_DATE = date(1900, 1, 1)


def generate_unique_filename(filename):
    """Unique on-disk name keeping the original extension"""
    if filename:
        ext = os.path.splitext(filename)[1].lower()
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        return f"{timestamp}_{uuid.uuid4().hex}{ext}"
    return None


def generate_reference_number():
    """Club invoice reference: INV-YYYYMMDD-XXXXXXXX"""
    return f"INV-{datetime.now().strftime('%Y%m%d')}-{uuid.uuid4().hex[:8].upper()}"


def to_naive_utc(value):
    """Drop timezone info after converting to UTC; stored datetimes are naive"""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_datetime(value, format_str=None):
    """Parse a datetime string (several common formats); None when unparseable"""
    if not value:
        return None

    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, time):
        return datetime.combine(TIME_ONLY_DATE, value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    value = str(value).strip()

    if format_str:
        try:
            return datetime.strptime(value, format_str)
        except ValueError:
            return None

    formats = [
        '%Y-%m-%dT%H:%M:%S',
        '%Y-%m-%dT%H:%M:%S.%f',
        '%Y-%m-%dT%H:%M',
        '%Y-%m-%d %H:%M:%S',
        '%Y-%m-%d %H:%M',
        '%Y-%m-%d',
        '%H:%M:%S.%f',
        '%H:%M:%S',
        '%M:%S.%f',
    ]

    cleaned = value.replace('Z', '').replace('+00:00', '')
    for fmt in formats:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue

    try:
        return to_naive_utc(datetime.fromisoformat(value.replace('Z', '+00:00')))
    except ValueError:
        pass

    return None


def parse_date(value):
    """Parse a date of birth; spreadsheet cells may hold datetimes or strings"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    for fmt in ('%Y-%m-%d', '%d/%m/%Y', '%d-%m-%Y', '%m/%d/%Y'):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    parsed = parse_datetime(text)
    return parsed.date() if parsed else None


def validate_phone(phone):
    """International phone number, 6-20 characters"""
    if not phone:
        return False
    phone = phone.strip()
    return 6 <= len(phone) <= 20 and PHONE_PATTERN.match(phone) is not None


def normalize_phone(phone):
    """Keep digits and a leading +"""
    if phone is None:
        return None
    phone = phone.strip()
    digits = re.sub(r'[^\d]', '', phone)
    return f"+{digits}" if phone.startswith('+') else digits


def get_pagination_args(size_param='perPage'):
    """Read page and page size from the query string.

    ``size_param`` names the page-size parameter; ``limit`` is accepted as an
    alias everywhere.
    """
    default_size = current_app.config.get('ITEMS_PER_PAGE', 10)
    max_size = current_app.config.get('MAX_ITEMS_PER_PAGE', 100)

    errors = []
    try:
        page = int(request.args.get('page', 1) or 1)
    except ValueError:
        errors.append(field_error('page', 'Page must be a positive integer'))
        page = 1

    raw_size = request.args.get(size_param) or request.args.get('limit') or default_size
    try:
        per_page = int(raw_size)
    except ValueError:
        errors.append(field_error(size_param, 'Page size must be a positive integer'))
        per_page = default_size

    if errors:
        raise ValidationError('Invalid pagination parameters', errors)

    page = max(page, 1)
    per_page = max(min(per_page, max_size), 1)
    return page, per_page


def parse_bool(value, default=True):
    """Spreadsheet truthiness: true/false, yes/no, 1/0"""
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in ('true', 'yes', 'y', '1', 'active')
