import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inspectra import __version__
from inspectra.api.middleware.audit import AuditMiddleware
from inspectra.api.routers import approvals, health, notifications, projects, reports, trips
from inspectra.common.logger import configure_logging
from inspectra.core.config import Settings, get_settings
from inspectra.store.base import DocumentStore
from inspectra.store.memory import MemoryDocumentStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> DocumentStore:
    """Create the document store selected by ``store_backend``."""
    if settings.store_backend == "memory":
        return MemoryDocumentStore()
    if settings.store_backend == "sql":
        from inspectra.db.session import engine_from_settings
        from inspectra.store.sql import SqlDocumentStore

        return SqlDocumentStore(engine_from_settings(settings))
    raise ValueError(f"Unknown store backend: {settings.store_backend}")


def create_app(store: Optional[DocumentStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application.

    Args:
        store: Document store to serve from; built from settings when omitted
        settings: Application settings; defaults to the cached environment settings
    """
    settings = settings or get_settings()

    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.store is None:
            app.state.store = build_store(settings)
            logger.info("Using %s store", settings.store_backend)
            if settings.seed_file:
                from inspectra.db.seed import seed_from_file

                seed_from_file(app.state.store, settings.seed_file)
        yield

    app = FastAPI(
        title=settings.app_name,
        description="Sequential approval workflows for trip requests and inspection reports",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Audit middleware - logs all API requests
    app.add_middleware(AuditMiddleware)

    app.include_router(health.router)
    app.include_router(projects.router, prefix="/api")
    app.include_router(trips.router, prefix="/api")
    app.include_router(reports.router, prefix="/api")
    app.include_router(approvals.router, prefix="/api")
    app.include_router(notifications.router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_app()
