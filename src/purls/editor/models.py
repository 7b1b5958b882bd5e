"""
pURLs Editor Models

Editable representation of a URL: a base plus an ordered sequence of
parameters, where the fragment is a tagged entry rather than a magic key.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class QueryParam:
    """A regular query parameter. Keys may repeat."""

    key: str
    value: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {'key': self.key, 'value': self.value}


@dataclass(frozen=True)
class Fragment:
    """The URL fragment, stored without its leading '#'."""

    value: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {'fragment': self.value}


Parameter = Union[QueryParam, Fragment]


def is_fragment(param: Parameter) -> bool:
    """Return True if the entry is the fragment sentinel."""
    return isinstance(param, Fragment)


def display_order(parameters) -> Tuple[Parameter, ...]:
    """
    Order entries for display: regular parameters first, fragments last.

    The sort is stable, so relative order inside each group is kept.
    """
    return tuple(sorted(parameters, key=is_fragment))


@dataclass(frozen=True)
class DecomposedUrl:
    """
    A URL split into base, ordered parameters and an optional fragment.

    Attributes:
        base: Scheme, authority and path (no query, no fragment)
        parameters: Query parameters and at most one Fragment entry
    """

    base: str = ""
    parameters: Tuple[Parameter, ...] = ()

    @property
    def query_params(self) -> List[QueryParam]:
        """Regular parameters in their original order."""
        return [p for p in self.parameters if isinstance(p, QueryParam)]

    @property
    def fragment(self) -> Optional[str]:
        """Text of the first fragment entry, or None if there is none."""
        for param in self.parameters:
            if isinstance(param, Fragment):
                return param.value
        return None

    @property
    def is_empty(self) -> bool:
        return not self.base and not self.parameters

    def display_order(self) -> Tuple[Parameter, ...]:
        """Parameters with the fragment entry sorted last."""
        return display_order(self.parameters)

    def with_parameters(self, parameters) -> 'DecomposedUrl':
        """Return a copy holding a new parameter sequence."""
        return DecomposedUrl(base=self.base, parameters=tuple(parameters))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'base': self.base,
            'parameters': [p.to_dict() for p in self.display_order()],
            'fragment': self.fragment
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DecomposedUrl':
        """
        Create from the dictionary form produced by to_dict().

        Entries with a 'fragment' key become Fragment entries; all others
        become QueryParam entries. A top-level 'fragment' is appended when no
        fragment entry is present.

        Raises:
            ValueError: If the structure or its field types are invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Expected an object with 'base' and 'parameters'")

        base = data.get('base', '')
        if not isinstance(base, str):
            raise ValueError("'base' must be a string")

        raw_params = data.get('parameters') or []
        if not isinstance(raw_params, list):
            raise ValueError("'parameters' must be a list")

        parameters: List[Parameter] = []
        for entry in raw_params:
            if not isinstance(entry, dict):
                raise ValueError(f"Invalid parameter entry: {entry!r}")
            if 'fragment' in entry:
                value = entry['fragment']
                if not isinstance(value, str):
                    raise ValueError("Fragment value must be a string")
                parameters.append(Fragment(value))
                continue
            key = entry.get('key', '')
            value = entry.get('value', '')
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValueError("Parameter key and value must be strings")
            parameters.append(QueryParam(key, value))

        fragment = data.get('fragment')
        if fragment is not None and not any(is_fragment(p) for p in parameters):
            if not isinstance(fragment, str):
                raise ValueError("'fragment' must be a string")
            parameters.append(Fragment(fragment))

        return cls(base=base, parameters=tuple(parameters))
