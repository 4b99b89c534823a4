"""Application factory for the Stockroom inventory service.

``create_app`` wires configuration, the storage backend, the three services
(auth, catalog, ledger), middleware, routers and error handling into one
FastAPI instance. Tests build their own app with explicit settings and
storage; ``stockroom.main`` builds the process-wide one.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from .core.config import AppSettings, get_settings
from .core.errors import register_exception_handlers
from .middlewares import RequestIdMiddleware
from .routers import api_auth, api_products, api_rentals
from .services.auth import AuthService
from .services.catalog import CatalogService
from .services.ledger import LedgerService
from .storage import Storage, build_storage

logger = logging.getLogger(__name__)


def create_app(settings: AppSettings | None = None, storage: Storage | None = None) -> FastAPI:
    settings = settings or get_settings()
    storage = storage or build_storage(settings)

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.storage = storage
    app.state.auth_service = AuthService(storage.accounts, settings)
    app.state.catalog_service = CatalogService(storage.products, settings)
    app.state.ledger_service = LedgerService(storage.rentals, settings)

    # Added last runs first: request ids wrap everything, CORS included.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(api_auth.router)
    app.include_router(api_products.router)
    app.include_router(api_rentals.router)
    app.include_router(api_rentals.records_router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, bool]:
        return {"ok": True}

    if settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app, include_in_schema=False)

    @app.on_event("startup")
    async def _open_storage() -> None:
        await storage.startup()
        logger.info("storage.ready", extra={"extra_data": {"backend": storage.backend}})

    @app.on_event("shutdown")
    async def _close_storage() -> None:
        await storage.shutdown()

    return app


__all__ = ["create_app"]
