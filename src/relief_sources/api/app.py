"""FastAPI application factory.

Serves ``POST /search-disaster-resources``, ``POST /search-recovery-resources``
and ``GET /health``. Every
response carries permissive CORS headers and any ``OPTIONS`` request is
answered with an empty 204, so browser clients can call the API directly.
"""

import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from relief_sources.api.schemas import ErrorResponse, HealthResponse, SearchRequest
from relief_sources.config import (
    Credentials,
    create_from_config,
    create_recovery_pipeline,
    get_default_config_path,
    load_config,
    prepare_storage,
)
from relief_sources.errors import InvalidInput
from relief_sources.pipeline.base import Pipeline

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

CONFIG_ENV_VAR = "RELIEF_CONFIG"


def _configure_logging(level: int = logging.INFO) -> None:
    """Configure console logging for the served application.

    Timestamps and module names on every line; noisy third-party loggers are
    held at WARNING.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=CORS_HEADERS,
    )


def _config_path() -> Path:
    configured = os.environ.get(CONFIG_ENV_VAR)
    return Path(configured) if configured else get_default_config_path()


def create_app(
    pipeline: Pipeline | None = None,
    recovery_pipeline: Pipeline | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        pipeline: Pipeline to serve. When omitted, one is built at startup
            from the YAML file named by ``RELIEF_CONFIG`` (or the bundled
            default config), with credentials from the environment.
        recovery_pipeline: Pipeline for recovery services. Only built at
            startup when ``pipeline`` is omitted and the config has a
            ``recovery`` section; without one the recovery route returns 404.

    Returns:
        Configured FastAPI app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if pipeline is not None:
            yield
            return

        _configure_logging()
        config_path = _config_path()
        logger.info(f"Loading config from {config_path}")
        config = load_config(config_path)
        credentials = Credentials.from_env()
        built, run_logger, engine = create_from_config(config, credentials=credentials)
        await prepare_storage(config, engine)
        app.state.pipeline = built
        app.state.recovery_pipeline = create_recovery_pipeline(
            config, built.store, credentials, run_logger
        )
        try:
            yield
        finally:
            if engine is not None:
                await engine.dispose()

    app = FastAPI(title="relief-sources", version="0.1.0", lifespan=lifespan)
    app.state.recovery_pipeline = recovery_pipeline
    if pipeline is not None:
        app.state.pipeline = pipeline

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(f"Rejected request body: {exc.errors()}")
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse()

    async def _serve(served: Pipeline, body: SearchRequest) -> JSONResponse:
        try:
            result = await served.aggregate(body.zip_code)
        except InvalidInput:
            raise
        except Exception as e:
            logger.exception(f"Aggregation failed: {e}")
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or "Internal server error")

        logger.info(
            f"Returning {len(result.resources)} resources "
            f"(cached={result.cached}, errors={len(result.errors)})"
        )
        return JSONResponse(content=result.to_response())

    @app.post("/search-disaster-resources")
    async def search_disaster_resources(body: SearchRequest, request: Request) -> JSONResponse:
        return await _serve(request.app.state.pipeline, body)

    @app.post("/search-recovery-resources")
    async def search_recovery_resources(body: SearchRequest, request: Request) -> JSONResponse:
        served: Pipeline | None = request.app.state.recovery_pipeline
        if served is None:
            return _error(status.HTTP_404_NOT_FOUND, "Recovery search is not configured")
        return await _serve(served, body)

    return app
