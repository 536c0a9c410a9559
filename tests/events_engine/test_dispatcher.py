from __future__ import annotations

import pytest
from sqlalchemy import select

from nft_ledger.core.database import session_scope
from nft_ledger.events_engine.dispatcher import EventDispatcher
from nft_ledger.events_engine.publisher import EventPublishError
from nft_ledger.models.platform_event import DeliveryState, PlatformEvent


class StubPublisher:
    def __init__(self) -> None:
        self.envelopes = []

    def publish(self, envelope):
        self.envelopes.append(envelope)


class FailingPublisher:
    def __init__(self) -> None:
        self.calls = 0

    def publish(self, envelope):
        self.calls += 1
        raise EventPublishError("topic unavailable")


def test_dispatcher_persists_then_publishes_after_commit() -> None:
    publisher = StubPublisher()
    dispatcher = EventDispatcher(publisher=publisher, default_source="test-ledger")

    with session_scope() as session:
        record = dispatcher.publish_event(
            session,
            event_type="listing.created",
            payload={"listing_id": 1, "price": 500},
            block_height=12,
        )
        assert record.delivery_state == DeliveryState.PENDING
        assert publisher.envelopes == []

    assert len(publisher.envelopes) == 1
    published = publisher.envelopes[0]
    assert published.source == "test-ledger"
    assert published.payload["price"] == 500

    with session_scope() as session:
        records = session.execute(select(PlatformEvent)).scalars().all()
        assert len(records) == 1
        record = records[0]
        assert record.event_type == "listing.created"
        assert record.payload["listing_id"] == 1
        assert record.block_height == 12
        assert record.delivery_state == DeliveryState.SUCCEEDED
        assert record.delivery_attempts == 1


def test_dispatcher_publishes_in_commit_order() -> None:
    publisher = StubPublisher()
    dispatcher = EventDispatcher(publisher=publisher, default_source="test-ledger")

    with session_scope() as session:
        for event_type in ("royalty.distributed", "token.transferred", "listing.purchased"):
            dispatcher.publish_event(session, event_type=event_type, payload={})

    assert [envelope.event_type for envelope in publisher.envelopes] == [
        "royalty.distributed",
        "token.transferred",
        "listing.purchased",
    ]


def test_dispatcher_publishes_nothing_when_transaction_rolls_back() -> None:
    publisher = StubPublisher()
    dispatcher = EventDispatcher(publisher=publisher, default_source="test-ledger")

    with pytest.raises(RuntimeError):
        with session_scope() as session:
            dispatcher.publish_event(session, event_type="royalty.distributed", payload={"amount": 1})
            raise RuntimeError("settlement failed")

    assert publisher.envelopes == []
    with session_scope() as session:
        assert session.execute(select(PlatformEvent)).scalars().all() == []


def test_dispatcher_records_failed_delivery_without_raising() -> None:
    publisher = FailingPublisher()
    dispatcher = EventDispatcher(publisher=publisher, default_source="test-ledger", max_attempts=3)

    with session_scope() as session:
        dispatcher.publish_event(session, event_type="offer.created", payload={"offer_id": 1})

    assert publisher.calls == 3
    with session_scope() as session:
        record = session.execute(select(PlatformEvent)).scalar_one()
        assert record.delivery_state == DeliveryState.FAILED
        assert record.delivery_attempts == 3
        assert record.last_error == "topic unavailable"
