"""
JSON body checks for routes.

Bodies that are missing or fail to parse count as ``{}``; bodies that parse
to the wrong shape raise InvalidRequestError, which the app renders as a
400 JSON error.
"""

from typing import Any, Dict, Optional

from flask import request

from .exceptions import InvalidRequestError


def json_object() -> Dict[str, Any]:
    """
    The request's JSON body as a dict.

    Raises:
        InvalidRequestError: If the body is JSON but not an object
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    return data


def optional_text(data: Dict[str, Any], key: str) -> Optional[str]:
    """``data[key]`` if it is a string, None if absent or null."""
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidRequestError(f"{key} must be a string", field=key)
    return value


def optional_flag(data: Dict[str, Any], key: str, default: bool = False) -> bool:
    """``data[key]`` if it is a JSON boolean, ``default`` if absent or null."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise InvalidRequestError(f"{key} must be true or false", field=key)
    return value
