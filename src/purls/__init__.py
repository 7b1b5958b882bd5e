"""pURLs: URL parameter editor and redirect parameter tracer."""

from .editor import DecomposedUrl, QueryParam, Fragment, decompose, compose
from .trace import RedirectTracer, RedirectChecker, RedirectReport, TraceConfig, diff_parameters

__all__ = [
    'DecomposedUrl',
    'QueryParam',
    'Fragment',
    'decompose',
    'compose',
    'RedirectTracer',
    'RedirectChecker',
    'RedirectReport',
    'TraceConfig',
    'diff_parameters',
]

__version__ = '1.0.0'
