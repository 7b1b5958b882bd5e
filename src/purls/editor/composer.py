"""
pURLs URL Composer

Serializes a base and an ordered parameter sequence back into a URL.
"""

from typing import Optional, Sequence

from .models import DecomposedUrl, Fragment, Parameter, QueryParam
from ..common import URLTools


def compose(base: str, parameters: Sequence[Parameter]) -> str:
    """
    Build a URL from a base and ordered parameters.

    Rules:
    - Empty base yields an empty string.
    - Parameters with a blank key are dropped.
    - Keys and values are percent-encoded independently.
    - Query parameters keep their order; the fragment always comes last
      and is emitted verbatim.

    Args:
        base: Scheme, authority and path
        parameters: Query parameters and an optional Fragment entry

    Returns:
        Composed URL string

    Example:
        >>> compose("http://e.com/p", [QueryParam("", "x"), QueryParam("a", "1")])
        'http://e.com/p?a=1'
    """
    if not base:
        return ""

    query = '&'.join(
        f"{URLTools.encode_component(p.key)}={URLTools.encode_component(p.value)}"
        for p in parameters
        if isinstance(p, QueryParam) and p.key.strip()
    )

    url = base
    if query:
        url += f"?{query}"

    fragment = _first_fragment(parameters)
    if fragment is not None and fragment.strip():
        url += f"#{fragment}"

    return url


def compose_decomposed(decomposed: DecomposedUrl) -> str:
    """Compose a DecomposedUrl back into a URL string."""
    return compose(decomposed.base, decomposed.parameters)


def _first_fragment(parameters: Sequence[Parameter]) -> Optional[str]:
    for param in parameters:
        if isinstance(param, Fragment):
            return param.value
    return None
