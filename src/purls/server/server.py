"""
pURLs API Server

FastAPI-based JSON API for decomposing, composing and redirect-checking URLs.

Endpoints:
- POST /api/redirect-check  Trace a URL's redirect chain
- POST /api/check           Decompose, recompose, trace and diff a URL
- POST /api/decompose       Split a URL into base, parameters and fragment
- POST /api/compose         Build a URL from base, parameters and fragment
- GET  /api/health          Liveness check
"""

from __future__ import annotations  # Enable forward references for type hints

import asyncio
import logging
import threading
from typing import Any, Callable, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..common import safe_json_parse
from ..editor import DecomposedUrl, compose_decomposed, decompose
from ..trace import InvalidTraceRequest, RedirectChecker, TraceConfig


class RedirectServer:
    """
    FastAPI server exposing the pURLs engine.

    Example:
        server = RedirectServer(TraceConfig(port=9000))
        server.start()

        # In tests
        client = TestClient(RedirectServer().get_app())
        client.post('/api/redirect-check', json={'url': 'http://example.com'})
    """

    def __init__(
        self,
        config: Optional[TraceConfig] = None,
        checker: Optional[RedirectChecker] = None
    ):
        """
        Initialize server.

        Args:
            config: Optional TraceConfig for tracing and server behavior
            checker: Optional RedirectChecker (built from config if None)
        """
        self.config = config or TraceConfig()
        self.checker = checker or RedirectChecker(config=self.config)

        self.logger = logging.getLogger("purls.server")
        self.logger.setLevel(getattr(logging, self.config.log_level.upper()))

        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes."""
        app = FastAPI(
            title="pURLs",
            description="URL parameter editor and redirect parameter tracer",
            version="1.0.0"
        )

        @app.get("/api/health")
        async def health():
            """Liveness check."""
            return JSONResponse(content={'status': 'ok'})

        @app.post("/api/redirect-check")
        async def redirect_check(request: Request):
            """Trace redirects: {url, maxRedirects?} -> {redirectChain, finalUrl, redirectCount}."""
            payload = await self._read_payload(request)
            return await self._run_traced(
                self.checker.handle_trace_request,
                payload,
                failure_message="Failed to check redirects"
            )

        @app.post("/api/check")
        async def check(request: Request):
            """Full check of a raw URL, including the parameter diff."""
            payload = await self._read_payload(request)
            return await self._run_traced(
                self.checker.handle_check_request,
                payload,
                failure_message="Failed to check redirects"
            )

        @app.post("/api/decompose")
        async def decompose_url(request: Request):
            """Split a URL into base, parameters and fragment."""
            payload = await self._read_payload(request)
            url = payload.get('url') if isinstance(payload, dict) else None
            if not isinstance(url, str):
                return self._error("Invalid URL", 400)

            decomposed = decompose(url)
            data = decomposed.to_dict()
            data['url'] = compose_decomposed(decomposed)
            return JSONResponse(content=data)

        @app.post("/api/compose")
        async def compose_url(request: Request):
            """Build a URL from {base, parameters, fragment?}."""
            payload = await self._read_payload(request)
            try:
                decomposed = DecomposedUrl.from_dict(payload)
            except ValueError as e:
                return self._error(str(e), 400)

            return JSONResponse(content={'url': compose_decomposed(decomposed)})

        return app

    async def _read_payload(self, request: Request) -> Any:
        """Decode the JSON body, or None when it is missing or malformed."""
        body = await request.body()
        return safe_json_parse(body)

    def _error(self, message: str, status_code: int) -> JSONResponse:
        return JSONResponse(content={'error': message}, status_code=status_code)

    async def _run_traced(
        self,
        handler: Callable[..., Dict[str, Any]],
        payload: Any,
        failure_message: str
    ) -> JSONResponse:
        """
        Run a blocking checker call in a worker thread.

        If the request task is cancelled, the tracer is told to stop at the
        next hop boundary.
        """
        cancel_event = threading.Event()

        try:
            result = await asyncio.to_thread(handler, payload, cancel_event)
        except asyncio.CancelledError:
            cancel_event.set()
            raise
        except InvalidTraceRequest as e:
            self.logger.info(f"Rejected trace request: {e}")
            return self._error(str(e), 400)
        except Exception:
            self.logger.exception("Redirect check error")
            return self._error(failure_message, 500)

        return JSONResponse(content=result)

    def start(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        access_log: bool = True
    ):
        """
        Start the API server (blocking).

        Args:
            host: Host to bind to (overrides config)
            port: Port to bind to (overrides config)
            access_log: Enable access logging
        """
        actual_host = host or self.config.host
        actual_port = port or self.config.port

        self.logger.info(f"pURLs API starting on {actual_host}:{actual_port}")
        self.logger.info(
            f"Max redirects: {self.config.max_redirects}, per-hop timeout: {self.config.timeout}s"
        )

        uvicorn.run(
            self.app,
            host=actual_host,
            port=actual_port,
            log_level=self.config.log_level,
            access_log=access_log
        )

    def get_app(self) -> FastAPI:
        """
        Get the FastAPI app instance for testing or custom deployment.

        Returns:
            FastAPI application instance
        """
        return self.app


def create_app(config: Optional[TraceConfig] = None) -> FastAPI:
    """
    Build the FastAPI app for ASGI servers.

    Example:
        uvicorn --factory purls.server:create_app
    """
    return RedirectServer(config or TraceConfig.load()).get_app()
