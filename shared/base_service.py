"""
Base service class for oauthtoy services.
"""

from fastapi import FastAPI, Request, Response
from http import HTTPStatus
from starlette.exceptions import HTTPException as StarletteHTTPException
import time

from shared.config import ServerConfig
from shared.logging import clear_context, configure_logging, get_logger, set_request_id
from shared.metrics import get_metrics_collector
from shared.errors import OAuthToyException
from shared.responses import error_envelope
from shared.version import __version__


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, config: ServerConfig):
        self.service_name = service_name
        self.config = config
        self.logger = get_logger(service_name)
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        configure_logging(service_name, self.config.log_level)

        self.app = self._create_app()
        self._setup_middleware()
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description=f"oauthtoy - {self.service_name.title()} Service",
            version=__version__,
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url="/redoc" if self.config.env == "local" else None,
        )

    def _setup_middleware(self):
        """Set up middleware."""

        @self.app.middleware("http")
        async def add_request_timing(request: Request, call_next):
            clear_context()
            set_request_id(request.headers.get("x-request-id"))
            start_time = time.time()

            response = await call_next(request)

            duration = time.time() - start_time

            self.metrics.record_http_request(
                method=request.method,
                endpoint=request.url.path,
                status_code=response.status_code,
                duration=duration
            )

            self.logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2)
            )

            return response

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            self.metrics.record_health_check("ok")
            return {
                "service": self.service_name,
                "status": "ok",
                "uptime_seconds": self._get_uptime(),
                "version": __version__,
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            from prometheus_client import CONTENT_TYPE_LATEST
            return Response(
                content=self.metrics.export(),
                media_type=CONTENT_TYPE_LATEST
            )

        # Error handlers
        @self.app.exception_handler(OAuthToyException)
        async def oauthtoy_exception_handler(request: Request, exc: OAuthToyException):
            """Handle OAuthToyException."""
            log = self.logger.warning if exc.status_code < 500 else self.logger.error
            log("Request failed", **exc.to_response().model_dump())
            self.metrics.record_error(exc.code)
            return error_envelope(request, exc.status_code, exc.public_message)

        @self.app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            """Render routing errors (404, 405) as envelopes."""
            try:
                message = HTTPStatus(exc.status_code).phrase.lower()
            except ValueError:
                message = str(exc.detail)
            self.logger.info(
                "HTTP error",
                method=request.method,
                path=request.url.path,
                status_code=exc.status_code,
            )
            return error_envelope(request, exc.status_code, message)

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return error_envelope(request, 500, "server error")

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
