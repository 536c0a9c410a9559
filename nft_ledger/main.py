"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nft_ledger.api.error_handlers import register_exception_handlers
from nft_ledger.api.routers import get_api_router
from nft_ledger.core.config import LedgerSettings, get_settings
from nft_ledger.core.database import session_scope
from nft_ledger.core.logging import configure_logging
from nft_ledger.services.bootstrap import ensure_ledger_initialized


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Application lifespan context for startup/shutdown hooks."""

    settings = get_settings()
    with session_scope() as session:
        ensure_ledger_initialized(session, settings)

    yield


def create_app(settings: LedgerSettings | None = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="NFT Marketplace Ledger",
        version="1.0.0",
        lifespan=lifespan,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app


app = create_app()
