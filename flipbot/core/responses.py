"""
Response envelopes.

Every endpoint answers with the same shape:

    {"status_code": 200, "message": "...", "data": {...}, "error": null}

Errors carry ``data: null`` and ``error: {"code": ..., "message": ...}``.
"""

from typing import Any


def success_response(status_code: int, message: str, data: Any = None) -> dict:
    """
    Example:
        >>> success_response(200, "Duplicate signal ignored", {"outcome": "duplicate"})
        {'status_code': 200, 'message': 'Duplicate signal ignored', 'data': {'outcome': 'duplicate'}, 'error': None}
    """
    return {
        "status_code": status_code,
        "message": message,
        "data": data,
        "error": None
    }


def error_response(status_code: int, message: str, error_code: str, error_message: str) -> dict:
    """
    Args:
        status_code: HTTP status code
        message: Short summary shown to the caller
        error_code: Machine-readable code, e.g. "TRANSITION_BUSY"
        error_message: Detail safe to expose; never the raw exchange payload
    """
    return {
        "status_code": status_code,
        "message": message,
        "data": None,
        "error": {
            "code": error_code,
            "message": error_message
        }
    }
