"""
pURLs Server Module

FastAPI JSON API over the editor and trace modules.
"""

from .server import RedirectServer, create_app

__all__ = [
    'RedirectServer',
    'create_app',
]
