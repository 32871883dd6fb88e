from contextlib import asynccontextmanager
from collections.abc import Sequence
import logging

from fastapi import FastAPI, Request

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from epgsync.config import settings, setup_logging
from epgsync.providers import BaseProvider, create_enabled_providers

from epgsync.routers import main_router


setup_logging()
logger = logging.getLogger(__name__)


def create_app(providers: Sequence[BaseProvider] | None = None) -> FastAPI:
    """
    Build the API application

    Args:
        providers: Pre-built providers; created from settings at startup when None
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events"""
        logger.info("Starting EPG Sync...")

        try:
            active = list(providers) if providers is not None else create_enabled_providers(settings)
        except Exception as e:
            logger.error(f"Failed to start EPG Sync: {e}", exc_info=True)
            raise

        app.state.providers = {provider.id: provider for provider in active}
        logger.info("EPG Sync started with %s provider(s)", len(active))

        yield

        logger.info("Shutting down EPG Sync...")
        for provider in active:
            try:
                await provider.aclose()
            except Exception as e:
                logger.error(f"Error closing provider {provider.id}: {e}", exc_info=True)
        logger.info("EPG Sync stopped")

    app = FastAPI(
        title="EPG Sync",
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
            error_dict = {
                "type": error.get("type"),
                "loc": error.get("loc"),
                "msg": error.get("msg"),
                "input": str(error.get("input", ""))[:100]
            }
            errors.append(error_dict)

        return JSONResponse(
            status_code=422,
            content={
                "detail": errors
            }
        )

    return app


app = create_app()
