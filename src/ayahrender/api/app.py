"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from ayahrender import __version__
from ayahrender.api.dependencies import get_temp_store
from ayahrender.api.middleware import (
    BodySizeLimitMiddleware,
    ayah_render_error_handler,
    request_validation_error_handler,
    unexpected_error_handler,
)
from ayahrender.api.routes import render
from ayahrender.config import get_settings
from ayahrender.models.errors import AyahRenderError


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # outputs left behind by a previous process
    get_temp_store().cleanup_expired()
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title="Ayah Render",
        description="Renders ayah videos from composition templates",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)

    # Error handlers
    app.add_exception_handler(AyahRenderError, ayah_render_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # Routes
    app.include_router(render.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
