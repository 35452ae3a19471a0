# sitegen/main.py
# FastAPI application factory and process entry point

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sitegen import config
from sitegen.db.base import get_engine
from sitegen.dependencies import ServiceContainer, build_container
from sitegen.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from sitegen.observability.logger import configure_logging
from sitegen.routers.auth import router as auth_router
from sitegen.routers.generations import router as generations_router
from sitegen.routers.health import router as health_router
from sitegen.routers.publish import router as publish_router
from sitegen.routers.sites import router as sites_router
from sitegen.routers.uploads import router as uploads_router
from sitegen.utils.logger import log_info
from sitegen.utils.telemetry import init_otel


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the application.

    `services` replaces the AWS/database wiring; when omitted the container
    is built from settings during startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config)
        if getattr(app.state, "services", None) is None:
            app.state.services = build_container(config.settings)
        log_info(f"{config.SERVICE_NAME} started")
        yield
        await get_engine().dispose()
        log_info(f"{config.SERVICE_NAME} stopped")

    app = FastAPI(
        title="Site Generator API",
        description="Generate, version and publish one-page business websites",
        version="1.0.0",
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    # Error handler should be outermost to catch all errors
    app.add_middleware(ErrorHandlerMiddleware, debug=config.DEBUG)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router)  # Health checks at root level
    app.include_router(auth_router, prefix="/api")
    app.include_router(uploads_router, prefix="/api")
    app.include_router(sites_router, prefix="/api")
    app.include_router(generations_router, prefix="/api")
    app.include_router(publish_router, prefix="/api")

    if config.settings.OTEL_ENABLED:
        init_otel(app=app, engine=get_engine(), service_name=config.SERVICE_NAME)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("sitegen.main:app", host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())
