"""
pURLs Common Utilities

Shared utilities and helpers used across pURLs modules.
"""

from .utils import safe_json_parse, get_env_setting, parse_bool
from .url_utils import URLTools

__all__ = [
    'safe_json_parse',
    'get_env_setting',
    'parse_bool',
    'URLTools'
]
