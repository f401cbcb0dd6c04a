"""API setup module."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ecoscore.entrypoints.api.endpoints.internal import analysis
from ecoscore.entrypoints.api.endpoints.metrics import health, statistics
from ecoscore.settings import Settings, settings
from ecoscore.setup.container import ServiceContainer, build_container


def create_app(
    config: Settings = settings, container: Optional[ServiceContainer] = None
) -> FastAPI:
    """Creates the FastAPI application."""

    @asynccontextmanager
    async def lifespan(
        app: FastAPI,
    ):
        """Context manager for the application's lifespan."""
        services = container or build_container(config)
        await services.start()
        app.state.container = services
        try:
            yield
        finally:
            await services.shutdown()

    fastapi_app = FastAPI(
        title="EcoScore Sustainability API",
        description="Scores scraped e-commerce products for sustainability.",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    fastapi_app.include_router(health.router, prefix="/health")
    fastapi_app.include_router(analysis.router, prefix="/analyze")
    fastapi_app.include_router(statistics.router, prefix="/metrics")

    # CORS (Cross-Origin Resource Sharing)
    origins = ["*"]
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return fastapi_app


app = create_app()


def entry() -> None:
    """Starts the scoring API."""

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "ecoscore.entrypoints.api.setup:app",
        host=settings.api_host,
        port=settings.api_port,
        loop="uvloop",
    )


if __name__ == "__main__":
    entry()
