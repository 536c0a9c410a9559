"""Pydantic models describing normalized ledger events."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class EventEnvelope(BaseModel):
    """Canonical ledger event used for SNS fan-out and the outbox table."""

    event_id: UUID = Field(default_factory=uuid4)
    event_type: str = Field(..., min_length=3, max_length=128)
    source: str = Field(..., min_length=3, max_length=128)
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp for when the ledger transaction committed.",
    )
    block_height: int = Field(default=0, ge=0)
    schema_version: str = Field(default="v1", max_length=16)
    payload: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("occurred_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
