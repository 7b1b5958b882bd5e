"""
pURLs Editor Operations

Pure edit operations over a parameter sequence. Every function takes the
current tuple and returns a new one; entries are addressed by position.
"""

from typing import Dict, Optional, Sequence, Tuple

from .models import Fragment, Parameter, QueryParam, display_order, is_fragment


# Conventional marketing attribution keys with reference descriptions
UTM_FIELDS: Dict[str, str] = {
    'utm_source': 'Identifies the source (e.g., google, newsletter)',
    'utm_medium': 'Identifies the medium (e.g., cpc, email, social)',
    'utm_campaign': 'Identifies the campaign (e.g., spring_sale)',
    'utm_term': 'Identifies paid search keywords',
    'utm_content': 'Differentiates similar content or links',
}

Params = Tuple[Parameter, ...]


def _fragment_index(params: Sequence[Parameter]) -> int:
    """Index of the first fragment entry, or len(params) if there is none."""
    for index, param in enumerate(params):
        if is_fragment(param):
            return index
    return len(params)


def _insert_before_fragment(params: Sequence[Parameter], new: Sequence[Parameter]) -> Params:
    position = _fragment_index(params)
    return tuple(params[:position]) + tuple(new) + tuple(params[position:])


def add_param(params: Sequence[Parameter], key: str = "", value: str = "") -> Params:
    """Add a query parameter just before the fragment entry (or at the end)."""
    return _insert_before_fragment(params, [QueryParam(key, value)])


def update_param(
    params: Sequence[Parameter],
    index: int,
    key: Optional[str] = None,
    value: Optional[str] = None
) -> Params:
    """
    Replace the key and/or value of the entry at index.

    Args:
        params: Current parameter sequence
        index: Position of the entry to change
        key: New key (regular parameters only)
        value: New value

    Returns:
        New parameter tuple

    Raises:
        IndexError: If index is out of range
        ValueError: If a key is given for the fragment entry
    """
    if not 0 <= index < len(params):
        raise IndexError(f"Parameter index out of range: {index}")

    current = params[index]
    if isinstance(current, Fragment):
        if key is not None:
            raise ValueError("The fragment entry has no key")
        updated: Parameter = Fragment(current.value if value is None else value)
    else:
        updated = QueryParam(
            current.key if key is None else key,
            current.value if value is None else value
        )

    return tuple(params[:index]) + (updated,) + tuple(params[index + 1:])


def remove_param(params: Sequence[Parameter], index: int) -> Params:
    """
    Remove the entry at index.

    Raises:
        IndexError: If index is out of range
    """
    if not 0 <= index < len(params):
        raise IndexError(f"Parameter index out of range: {index}")
    return tuple(params[:index]) + tuple(params[index + 1:])


def add_utm_fields(params: Sequence[Parameter]) -> Params:
    """Add empty UTM parameters that are not already present."""
    existing = {p.key for p in params if isinstance(p, QueryParam)}
    new = [QueryParam(key, "") for key in UTM_FIELDS if key not in existing]
    return _insert_before_fragment(params, new)


def add_fragment(params: Sequence[Parameter], value: str = "") -> Params:
    """Append a fragment entry unless one already exists."""
    if any(is_fragment(p) for p in params):
        return tuple(params)
    return tuple(params) + (Fragment(value),)


def set_fragment(params: Sequence[Parameter], value: str) -> Params:
    """Set the fragment text, adding the entry if needed."""
    position = _fragment_index(params)
    if position == len(params):
        return add_fragment(params, value)
    return update_param(params, position, value=value)


def set_param(params: Sequence[Parameter], key: str, value: str) -> Params:
    """Update the first parameter named key, or add it if missing."""
    for index, param in enumerate(params):
        if isinstance(param, QueryParam) and param.key == key:
            return update_param(params, index, value=value)
    return add_param(params, key, value)


def remove_key(params: Sequence[Parameter], key: str) -> Params:
    """Remove every regular parameter named key."""
    return tuple(
        p for p in params
        if not (isinstance(p, QueryParam) and p.key == key)
    )


def separator_for(params: Sequence[Parameter], index: int) -> str:
    """
    Separator shown next to an entry in display order.

    Returns '#' for the fragment, '?' for the first query parameter and
    '&' for every following one.
    """
    ordered = display_order(params)
    param = ordered[index]
    if is_fragment(param):
        return '#'
    return '?' if index == 0 else '&'
