"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Path, status
from sqlalchemy.orm import Session

from nft_ledger.core.database import get_session, get_write_session
from nft_ledger.events_engine import get_event_dispatcher
from nft_ledger.events_engine.service import EventService
from nft_ledger.models.types import MAX_LEDGER_INT
from nft_ledger.services.chain import ChainService
from nft_ledger.services.marketplace import MarketplaceService
from nft_ledger.services.registry import TokenRegistryService
from nft_ledger.services.royalties import RoyaltyService

# Token, listing and offer ids in the URL path.
LedgerId = Annotated[int, Path(le=MAX_LEDGER_INT)]


def get_db_session() -> Session:
    yield from get_session()


def get_write_db_session() -> Session:
    yield from get_write_session()


def require_caller(x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id")) -> str:
    """Authenticated principal for a mutating call, supplied by the wallet gateway."""

    if x_actor_id is None or not x_actor_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-Actor-Id header is required")
    return x_actor_id.strip()


def get_registry_service(session: Session = Depends(get_write_db_session)) -> TokenRegistryService:
    return TokenRegistryService(session, event_dispatcher=get_event_dispatcher())


def get_registry_reader(session: Session = Depends(get_db_session)) -> TokenRegistryService:
    return TokenRegistryService(session, event_dispatcher=get_event_dispatcher())


def get_marketplace_service(session: Session = Depends(get_write_db_session)) -> MarketplaceService:
    return MarketplaceService(session, event_dispatcher=get_event_dispatcher())


def get_marketplace_reader(session: Session = Depends(get_db_session)) -> MarketplaceService:
    return MarketplaceService(session, event_dispatcher=get_event_dispatcher())


def get_royalty_service(session: Session = Depends(get_write_db_session)) -> RoyaltyService:
    return RoyaltyService(session, event_dispatcher=get_event_dispatcher())


def get_royalty_reader(session: Session = Depends(get_db_session)) -> RoyaltyService:
    return RoyaltyService(session, event_dispatcher=get_event_dispatcher())


def get_chain_service(session: Session = Depends(get_write_db_session)) -> ChainService:
    return ChainService(session, event_dispatcher=get_event_dispatcher())


def get_chain_reader(session: Session = Depends(get_db_session)) -> ChainService:
    return ChainService(session, event_dispatcher=get_event_dispatcher())


def get_event_service(session: Session = Depends(get_db_session)) -> EventService:
    return EventService(session)
