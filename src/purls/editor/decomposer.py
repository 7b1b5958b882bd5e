"""
pURLs URL Decomposer

Turns a raw, possibly malformed URL into an editable DecomposedUrl.
"""

import logging
import re
from typing import List, Optional

from .models import DecomposedUrl, Fragment, Parameter, QueryParam
from ..common import URLTools

logger = logging.getLogger("purls.editor")

# "text#fragment?query" -> groups: text, "#fragment", query
FRAGMENT_BEFORE_QUERY = re.compile(r'^([^#]*)(#[^?]*)\?(.*)$', re.DOTALL)

C0_CONTROL_OR_SPACE = ''.join(chr(code) for code in range(0x21))
TAB_OR_NEWLINE = re.compile(r'[\t\r\n]')


def repair_fragment_order(raw: str) -> str:
    """
    Move a fragment that precedes the query string to the end.

    "http://e.com/p#sec?a=1" becomes "http://e.com/p?a=1#sec". Input without
    that pattern is returned unchanged.
    """
    match = FRAGMENT_BEFORE_QUERY.match(raw)
    if not match:
        return raw
    prefix, fragment, query = match.groups()
    return f"{prefix}?{query}{fragment}"


def decompose(raw: str) -> DecomposedUrl:
    """
    Split a URL into base, ordered query parameters and fragment.

    Never raises: input the strict parser rejects is split textually
    instead, so the editor stays usable for any text.

    Args:
        raw: URL text as typed or pasted by the user

    Returns:
        DecomposedUrl with the fragment (if any) as the last entry

    Example:
        >>> decompose("http://e.com/p#sec?a=1").fragment
        'sec'
    """
    cleaned = clean_input(raw or "")
    if not cleaned:
        return DecomposedUrl()

    repaired = repair_fragment_order(cleaned)

    try:
        return _decompose_strict(repaired)
    except ValueError as e:
        logger.debug(f"Strict parse failed for {cleaned!r} ({e}); splitting manually")
        return _decompose_manual(cleaned)


def clean_input(raw: str) -> str:
    """
    Trim pasted text the way browsers do before parsing a URL.

    Leading and trailing control characters and spaces are stripped and
    every tab, CR and LF is removed. Inner spaces are kept.
    """
    return TAB_OR_NEWLINE.sub('', raw.strip(C0_CONTROL_OR_SPACE))


def _decompose_strict(url: str) -> DecomposedUrl:
    """Decompose an absolute URL using the standard parser."""
    parsed = URLTools.validate_absolute_url(url)
    base = URLTools.build_base(parsed)

    parameters: List[Parameter] = [
        QueryParam(key, value)
        for key, value in URLTools.query_pairs(parsed.query)
        if key
    ]

    if parsed.fragment:
        parameters.append(Fragment(parsed.fragment))

    return DecomposedUrl(base=base, parameters=tuple(parameters))


def _decompose_manual(raw: str) -> DecomposedUrl:
    """Best-effort textual split for input the strict parser rejects."""
    working = raw
    fragment: Optional[str] = None

    if '#' in working:
        working, fragment_text = working.split('#', 1)
        fragment = URLTools.decode_component(fragment_text)

    match = FRAGMENT_BEFORE_QUERY.match(raw)
    if match:
        prefix, fragment_text, query = match.groups()
        working = f"{prefix}?{query}"
        fragment = URLTools.decode_component(fragment_text[1:])

    base, _, query = working.partition('?')

    parameters: List[Parameter] = []
    if query:
        for piece in query.split('&'):
            key, separator, value = piece.partition('=')
            if not separator or not key:
                continue
            parameters.append(QueryParam(
                URLTools.decode_component(key),
                URLTools.decode_component(value)
            ))

    if fragment:
        parameters.append(Fragment(fragment))

    return DecomposedUrl(base=base, parameters=tuple(parameters))
