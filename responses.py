"""
Response envelope shared by every endpoint:

    {"success": ..., "statusCode": ..., "message": ..., "data"|"errors": ..., "timestamp": ...}
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from flask import jsonify
from flask.json.provider import DefaultJSONProvider

from calendar_utils import format_date


def _timestamp():
    return datetime.now(timezone.utc).isoformat()


class ApiJSONProvider(DefaultJSONProvider):
    """Decimals as plain numbers, dates as YYYY-MM-DD, datetimes as ISO-8601."""

    sort_keys = False

    @staticmethod
    def default(o):
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, date):
            return format_date(o)
        return DefaultJSONProvider.default(o)


def success(data=None, message='Success', status_code=200):
    body = {
        'success': True,
        'statusCode': status_code,
        'message': message,
        'data': data,
        'timestamp': _timestamp(),
    }
    return jsonify(body), status_code


def created(data, message='Resource created successfully'):
    return success(data, message, 201)


def error(message='Internal Server Error', status_code=500, errors=None):
    body = {
        'success': False,
        'statusCode': status_code,
        'message': message,
        'errors': errors,
        'timestamp': _timestamp(),
    }
    return jsonify(body), status_code
