"""Event dispatcher that stores ledger events in the outbox and publishes them."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from nft_ledger.core.database import run_after_commit, session_scope
from nft_ledger.events_engine.config import get_event_engine_config
from nft_ledger.events_engine.publisher import (
    EventPublishError,
    EventPublisher,
    NullEventPublisher,
    SnsEventPublisher,
)
from nft_ledger.events_engine.schemas import EventEnvelope
from nft_ledger.models.platform_event import DeliveryState, PlatformEvent

_dispatcher: Optional["EventDispatcher"] = None

_PENDING_KEY = "pending_event_envelopes"

LOGGER = logging.getLogger("nft_ledger.events_engine.dispatcher")


@dataclass(frozen=True)
class DeliveryOutcome:
    state: DeliveryState
    attempts: int
    error: Optional[str]


class EventDispatcher:
    """Coordinates persistence and delivery of ledger events.

    The outbox row is written inside the caller's transaction, so an event is
    stored only if the ledger mutation that produced it commits. Publishing
    happens after that commit, outside the write lock, and the outcome is
    recorded on the row in a follow-up transaction. Delivery failures never
    abort the ledger transaction.
    """

    def __init__(
        self,
        *,
        publisher: EventPublisher,
        default_source: str,
        max_attempts: int = 2,
    ) -> None:
        self._publisher = publisher
        self._default_source = default_source
        self._max_attempts = max(max_attempts, 1)

    def publish_event(
        self,
        session: Session,
        *,
        event_type: str,
        payload: Dict[str, object],
        block_height: int = 0,
        source: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
        schema_version: str = "v1",
    ) -> PlatformEvent:
        """Persist a pending event record; it is published once ``session`` commits."""

        envelope = EventEnvelope(
            event_type=event_type,
            payload=payload,
            source=source or self._default_source,
            occurred_at=occurred_at or datetime.now(timezone.utc),
            block_height=block_height,
            schema_version=schema_version,
        )

        record = PlatformEvent(
            event_id=str(envelope.event_id),
            event_type=envelope.event_type,
            source=envelope.source,
            occurred_at=envelope.occurred_at,
            block_height=envelope.block_height,
            schema_version=envelope.schema_version,
            payload=envelope.payload,
            delivery_state=DeliveryState.PENDING,
            delivery_attempts=0,
        )
        session.add(record)
        session.flush()

        pending = session.info.get(_PENDING_KEY)
        if pending is None:
            pending = session.info[_PENDING_KEY] = []
            run_after_commit(session, lambda: self.deliver_committed(pending))
        pending.append(envelope)
        return record

    def deliver_committed(self, envelopes: List[EventEnvelope]) -> None:
        """Publish events whose transaction has committed, in commit order."""

        outcomes = [(envelope, self._deliver(envelope)) for envelope in envelopes]
        with session_scope() as session:
            for envelope, outcome in outcomes:
                record = session.scalar(select(PlatformEvent).where(PlatformEvent.event_id == str(envelope.event_id)))
                if record is None:
                    continue
                record.delivery_state = outcome.state
                record.delivery_attempts += outcome.attempts
                record.last_error = outcome.error
                session.add(record)

    def _deliver(self, envelope: EventEnvelope) -> DeliveryOutcome:
        event_id = str(envelope.event_id)
        last_error: Optional[str] = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                self._publisher.publish(envelope)
            except EventPublishError as exc:
                last_error = str(exc)[:1024]
                LOGGER.warning(
                    "events_engine_publish_attempt_failed",
                    extra={"event_id": event_id, "event_type": envelope.event_type, "attempt": attempt},
                )
                continue
            LOGGER.info(
                "events_engine_published",
                extra={"event_id": event_id, "event_type": envelope.event_type, "block_height": envelope.block_height},
            )
            return DeliveryOutcome(state=DeliveryState.SUCCEEDED, attempts=attempt, error=None)

        LOGGER.error(
            "events_engine_publish_failed",
            extra={"event_id": event_id, "event_type": envelope.event_type, "error": last_error},
        )
        return DeliveryOutcome(state=DeliveryState.FAILED, attempts=self._max_attempts, error=last_error)


def get_event_dispatcher() -> EventDispatcher:
    """Return the singleton event dispatcher for the application."""

    global _dispatcher
    if _dispatcher is not None:
        return _dispatcher

    config = get_event_engine_config()

    if config.topic_arn:
        region = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1"
        publisher: EventPublisher = SnsEventPublisher(topic_arn=config.topic_arn, region_name=region)
    else:
        publisher = NullEventPublisher()

    _dispatcher = EventDispatcher(
        publisher=publisher,
        default_source=config.source,
        max_attempts=config.max_attempts,
    )
    return _dispatcher


def set_event_dispatcher(dispatcher: Optional[EventDispatcher]) -> None:
    """Override the cached dispatcher (primarily for tests)."""

    global _dispatcher
    _dispatcher = dispatcher
