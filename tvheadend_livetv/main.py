from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import httpx

from tvheadend_livetv.config import get_settings, setup_logging
from tvheadend_livetv.errors import (
    ConfigurationUnavailableError,
    InvalidRequestError,
    UpstreamError,
)
from tvheadend_livetv.routers import main_router
from tvheadend_livetv.schemas import ErrorDetail, StandardErrorResponse
from tvheadend_livetv.services import ConfigProvider, LiveTvService


setup_logging()
logger = logging.getLogger(__name__)


def create_app(
    service_factory: Callable[[], LiveTvService] | None = None,
    config_provider: ConfigProvider = get_settings,
) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        service_factory: Callable creating the LiveTvService (tests pass a preconfigured one)
        config_provider: Settings provider handed to the default service

    Returns:
        Application whose lifespan owns the service
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events"""
        logger.info("Starting TVHeadend Live TV Service...")
        try:
            config = config_provider()
            if config is not None:
                logging.getLogger().setLevel(config.log_level)
        except ConfigurationUnavailableError as e:
            logger.warning(f"Configuration not available at startup: {e}")

        if service_factory is not None:
            service = service_factory()
        else:
            service = LiveTvService(config_provider)
        app.state.live_tv_service = service
        logger.info("TVHeadend Live TV Service started successfully")

        yield

        logger.info("Shutting down TVHeadend Live TV Service...")
        try:
            await service.aclose()
        except Exception as e:
            logger.error(f"Error during service shutdown: {e}", exc_info=True)
        logger.info("TVHeadend Live TV Service stopped")

    app = FastAPI(
        title="TVHeadend Live TV Service",
        version="0.1.0",
        lifespan=lifespan
    )
    app.include_router(main_router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Log validation errors with details"""
        logger.error(f"Validation error for {request.method} {request.url.path}")
        logger.error(f"Validation details: {exc.errors()}")

        errors = []
        for error in exc.errors():
            errors.append({
                "type": error.get("type"),
                "loc": error.get("loc"),
                "msg": error.get("msg"),
                "input": str(error.get("input", ""))[:100]
            })

        return JSONResponse(status_code=422, content={"detail": errors})

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        return _error_response(400, "VALIDATION_ERROR", exc)

    @app.exception_handler(ConfigurationUnavailableError)
    async def configuration_handler(request: Request, exc: ConfigurationUnavailableError):
        return _error_response(503, "CONFIGURATION_UNAVAILABLE", exc)

    @app.exception_handler(UpstreamError)
    async def upstream_handler(request: Request, exc: UpstreamError):
        context = None
        status_code = getattr(exc, "status_code", None)
        if status_code is not None:
            context = {"upstream_status": status_code}
        return _error_response(502, "UPSTREAM_ERROR", exc, context)

    @app.exception_handler(httpx.HTTPError)
    async def transport_handler(request: Request, exc: httpx.HTTPError):
        logger.error(f"TVHeadend unreachable for {request.method} {request.url.path}: {exc}")
        return _error_response(502, "UPSTREAM_UNREACHABLE", exc)

    return app


def _error_response(status_code: int, code: str, exc: Exception, context: dict | None = None) -> JSONResponse:
    payload = StandardErrorResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        error=ErrorDetail(code=code, message=str(exc), context=context),
    )
    return JSONResponse(status_code=status_code, content=payload.model_dump())


app = create_app()
