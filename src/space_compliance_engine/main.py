"""Space compliance engine service entry point.

Initializes the FastAPI application with:
- Structured logging configured from settings
- The requirement catalog, loaded once and shared read-only by every request
- Exception handlers translating engine errors to JSON error responses
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from space_compliance_engine import __version__
from space_compliance_engine.api.router import router
from space_compliance_engine.assessment.engine import create_default_engine
from space_compliance_engine.errors import (
    ComplianceEngineError,
    ComputationError,
    NotFoundError,
    ValidationError,
)
from space_compliance_engine.observability import configure_logging, get_logger
from space_compliance_engine.settings import Settings, get_settings

logger = get_logger(__name__)

# Engine error type -> HTTP status
ERROR_STATUS_CODES: dict[type[ComplianceEngineError], int] = {
    ValidationError: 422,
    NotFoundError: 404,
    ComputationError: 500,
}


async def handle_engine_error(request: Request, exc: Exception) -> JSONResponse:
    """Translate an engine error into a JSON error response.

    Args:
        request: The failing request.
        exc: The raised ComplianceEngineError.

    Returns:
        JSONResponse with {"error": <type>, "detail": <message>}.
    """
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500,
    )
    message = exc.message if isinstance(exc, ComplianceEngineError) else str(exc)
    log = logger.error if status_code >= 500 else logger.info
    log("Request failed", path=request.url.path, error_type=type(exc).__name__, status_code=status_code, detail=message)
    return JSONResponse(status_code=status_code, content={"error": type(exc).__name__, "detail": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Register engine error handlers on an application."""
    app.add_exception_handler(ComplianceEngineError, handle_engine_error)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Service settings; defaults to the process settings.

    Returns:
        Configured FastAPI application. The catalog is loaded by the lifespan.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Load the catalog on startup and share it through app.state.

        Args:
            app: The FastAPI application instance.

        Yields:
            None
        """
        configure_logging(settings)
        logger.info("Loading requirement catalog", service=settings.service_name, catalog_dir=settings.catalog_dir)
        app.state.engine = create_default_engine(settings)
        app.state.settings = settings
        logger.info(
            "Compliance engine startup complete",
            frameworks=[str(code) for code in app.state.engine.catalog.frameworks()],
        )

        yield

        logger.info("Compliance engine shutdown complete")

    app = FastAPI(title=settings.service_name, version=__version__, lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(router, prefix="/api/v1")
    return app


app: FastAPI = create_app()
