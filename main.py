import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from notistream.config import get_settings
from notistream.interfaces.api.routes import register_routes
from notistream.infrastructure.database import initialize_database, engine
from notistream.infrastructure.notifications import stream_registry


def configure_logging() -> None:
    """Apply the configured root log level and a single console handler."""

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema on startup; close live streams and the pool on shutdown."""

    initialize_database()
    yield
    stream_registry.close_all()
    engine.dispose()


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""

    configure_logging()
    settings = get_settings()
    app = FastAPI(title="notistream", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
