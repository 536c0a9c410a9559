"""Router registrations."""

from fastapi import APIRouter

from nft_ledger.api.routers import chain, collections, events, health, marketplace, royalties


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router, tags=["health"])
    router.include_router(collections.router, prefix="/api/v1/collections", tags=["collections"])
    router.include_router(marketplace.router, prefix="/api/v1/marketplace", tags=["marketplace"])
    router.include_router(royalties.router, prefix="/api/v1/royalties", tags=["royalties"])
    router.include_router(chain.router, prefix="/api/v1/chain", tags=["chain"])
    router.include_router(events.router, prefix="/api/v1/events", tags=["events"])
    return router
