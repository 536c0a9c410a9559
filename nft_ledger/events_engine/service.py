"""Read access to stored ledger events for indexers."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from nft_ledger.models.platform_event import DeliveryState, PlatformEvent


class EventNotFoundError(LookupError):
    """Raised when a requested event does not exist."""


class EventService:
    """Queries the event outbox in commit order."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_events(
        self,
        *,
        event_type: Optional[str] = None,
        delivery_state: Optional[DeliveryState] = None,
        since_block: Optional[int] = None,
        limit: int = 50,
    ) -> List[PlatformEvent]:
        stmt = select(PlatformEvent).order_by(PlatformEvent.occurred_at, PlatformEvent.created_at).limit(limit)
        if event_type:
            stmt = stmt.where(PlatformEvent.event_type == event_type)
        if delivery_state:
            stmt = stmt.where(PlatformEvent.delivery_state == delivery_state)
        if since_block is not None:
            stmt = stmt.where(PlatformEvent.block_height >= since_block)
        return list(self._session.scalars(stmt))

    def get_event(self, event_id: str) -> PlatformEvent:
        record = self._session.scalar(select(PlatformEvent).where(PlatformEvent.event_id == event_id))
        if not record:
            raise EventNotFoundError(f"Event {event_id} not found")
        return record
