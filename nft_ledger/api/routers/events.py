"""Ledger event query endpoints for indexers."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from nft_ledger.api.dependencies import get_event_service
from nft_ledger.events_engine.service import EventService
from nft_ledger.models.platform_event import DeliveryState
from nft_ledger.schemas.event import EventResponse

router = APIRouter()


@router.get(
    "",
    response_model=List[EventResponse],
)
def list_events(
    event_type: Optional[str] = Query(default=None, max_length=128),
    delivery_state: Optional[DeliveryState] = Query(default=None),
    since_block: Optional[int] = Query(default=None, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    service: EventService = Depends(get_event_service),
) -> List[EventResponse]:
    records = service.list_events(
        event_type=event_type,
        delivery_state=delivery_state,
        since_block=since_block,
        limit=limit,
    )
    return [EventResponse.model_validate(record, from_attributes=True) for record in records]


@router.get(
    "/{event_id}",
    response_model=EventResponse,
)
def get_event(
    event_id: str,
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    record = service.get_event(event_id)
    return EventResponse.model_validate(record, from_attributes=True)
