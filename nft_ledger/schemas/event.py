"""Stored ledger event schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from nft_ledger.models.platform_event import DeliveryState


class EventResponse(BaseModel):
    """API response describing a stored ledger event."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: str
    event_type: str
    source: str
    occurred_at: datetime
    block_height: int
    schema_version: str
    payload: Dict[str, Any]
    delivery_state: DeliveryState
    delivery_attempts: int
    last_error: Optional[str]
    created_at: datetime
