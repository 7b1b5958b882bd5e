"""
pURLs Editor Module

URL decomposition, recomposition and parameter editing.

This module provides:
- Tolerant URL decomposition (including fragment-before-query repair)
- Deterministic URL composition
- Pure edit operations over the parameter sequence
"""

from .models import DecomposedUrl, QueryParam, Fragment, Parameter
from .decomposer import decompose, repair_fragment_order, clean_input
from .composer import compose, compose_decomposed
from .edits import (
    UTM_FIELDS,
    add_param,
    update_param,
    remove_param,
    add_utm_fields,
    add_fragment,
    set_fragment,
    set_param,
    remove_key,
    separator_for
)

__all__ = [
    # Models
    'DecomposedUrl',
    'QueryParam',
    'Fragment',
    'Parameter',

    # Decomposer / composer
    'decompose',
    'repair_fragment_order',
    'clean_input',
    'compose',
    'compose_decomposed',

    # Edits
    'UTM_FIELDS',
    'add_param',
    'update_param',
    'remove_param',
    'add_utm_fields',
    'add_fragment',
    'set_fragment',
    'set_param',
    'remove_key',
    'separator_for',
]
