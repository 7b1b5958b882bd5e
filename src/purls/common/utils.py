"""
pURLs Common Utilities

Shared helpers for JSON payloads and environment settings.
"""

import json
import os
from typing import Any, Optional


TRUE_VALUES = {'1', 'true', 'yes', 'on'}
FALSE_VALUES = {'0', 'false', 'no', 'off'}


def safe_json_parse(json_string: Any, default: Any = None) -> Any:
    """
    Safely parse JSON string with error handling.

    Args:
        json_string: JSON string (or bytes) to parse
        default: Default value to return if parsing fails

    Returns:
        Parsed JSON object, or default if parsing fails

    Example:
        payload = safe_json_parse(await request.body(), default={})
    """
    if not json_string:
        return default

    try:
        return json.loads(json_string)
    except (json.JSONDecodeError, TypeError, ValueError):
        return default


def get_env_setting(name: str) -> Optional[str]:
    """
    Read a pURLs setting from the environment.

    Blank values are treated as unset.

    Returns:
        Stripped value, or None if the variable is missing or blank
    """
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def parse_bool(value: str) -> bool:
    """
    Parse a boolean flag from text such as "true", "0" or "off".

    Raises:
        ValueError: If the text is not a recognized boolean
    """
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")
