"""FastAPI dependencies handing out the services built in ``create_app``."""

from __future__ import annotations

from fastapi import Request

from ..services.auth import AuthService
from ..services.catalog import CatalogService
from ..services.ledger import LedgerService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_ledger_service(request: Request) -> LedgerService:
    return request.app.state.ledger_service
