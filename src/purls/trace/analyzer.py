"""
pURLs Parameter-Diff Analyzer

Compares the query parameters of the origin and final URL of a redirect
chain and classifies each key as preserved, lost or added.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..common import URLTools


@dataclass(frozen=True)
class ParamEntry:
    """
    A single key in a parameter diff.

    Attributes:
        key: Query parameter name
        value: Value in the final URL (origin value for lost keys)
        original_value: Origin value when it differs from value, else None
    """

    key: str
    value: str
    original_value: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.original_value is not None and self.original_value != self.value

    @property
    def label(self) -> str:
        if self.changed:
            return f"{self.key}={self.value} (changed from {self.original_value})"
        return f"{self.key}={self.value}"

    def __str__(self) -> str:
        return self.label

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'value': self.value,
            'changed': self.changed,
            'original_value': self.original_value
        }


@dataclass(frozen=True)
class ParameterDiff:
    """Query parameters preserved, lost and added between two URLs."""

    preserved: Tuple[ParamEntry, ...] = ()
    lost: Tuple[ParamEntry, ...] = ()
    added: Tuple[ParamEntry, ...] = ()

    @property
    def changed(self) -> Tuple[ParamEntry, ...]:
        """Preserved entries whose value differs between the two URLs."""
        return tuple(entry for entry in self.preserved if entry.changed)

    @property
    def has_losses(self) -> bool:
        return bool(self.lost)

    def labels(self) -> Dict[str, List[str]]:
        """Rendered "key=value" strings for each bucket."""
        return {
            'preserved': [entry.label for entry in self.preserved],
            'lost': [entry.label for entry in self.lost],
            'added': [entry.label for entry in self.added]
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'preserved': [entry.to_dict() for entry in self.preserved],
            'lost': [entry.to_dict() for entry in self.lost],
            'added': [entry.to_dict() for entry in self.added]
        }


def diff_query_maps(origin: Dict[str, str], final: Dict[str, str]) -> ParameterDiff:
    """
    Classify the keys of two query-parameter mappings.

    Args:
        origin: Parameters of the first URL in the chain
        final: Parameters of the last URL in the chain

    Returns:
        ParameterDiff whose buckets follow the iteration order of the
        respective mapping
    """
    preserved: List[ParamEntry] = []
    lost: List[ParamEntry] = []
    added: List[ParamEntry] = []

    for key, value in origin.items():
        if key in final:
            final_value = final[key]
            preserved.append(ParamEntry(
                key=key,
                value=final_value,
                original_value=value if value != final_value else None
            ))
        else:
            lost.append(ParamEntry(key=key, value=value))

    for key, value in final.items():
        if key not in origin:
            added.append(ParamEntry(key=key, value=value))

    return ParameterDiff(
        preserved=tuple(preserved),
        lost=tuple(lost),
        added=tuple(added)
    )


def diff_parameters(origin_url: str, final_url: str) -> ParameterDiff:
    """
    Compare the query parameters of two URLs.

    Repeated keys collapse to their last value before comparison.

    Example:
        >>> diff = diff_parameters("http://a.test/?utm_source=a", "http://b.test/?utm_source=b")
        >>> [str(e) for e in diff.preserved]
        ['utm_source=b (changed from a)']
    """
    return diff_query_maps(URLTools.query_map(origin_url), URLTools.query_map(final_url))
