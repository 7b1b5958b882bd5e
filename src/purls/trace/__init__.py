"""
pURLs Trace Module

Redirect tracing and query-parameter analysis.

This module provides:
- Bounded hop-by-hop redirect tracing
- Preserved / lost / added parameter diffs
- A checker that composes, traces and diffs in one call
- YAML and environment based configuration
"""

from .tracer import RedirectTracer, RedirectChain, Hop
from .analyzer import ParamEntry, ParameterDiff, diff_parameters, diff_query_maps
from .trace_config import TraceConfig
from .checker import RedirectChecker, RedirectReport, InvalidTraceRequest, parse_trace_request

__all__ = [
    'RedirectTracer',
    'RedirectChain',
    'Hop',
    'ParamEntry',
    'ParameterDiff',
    'diff_parameters',
    'diff_query_maps',
    'TraceConfig',
    'RedirectChecker',
    'RedirectReport',
    'InvalidTraceRequest',
    'parse_trace_request',
]
