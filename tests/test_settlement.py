from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from nft_ledger.core.database import session_scope
from nft_ledger.models.marketplace import Sale
from nft_ledger.models.platform_event import PlatformEvent
from nft_ledger.models.types import MAX_LEDGER_INT
from nft_ledger.services.chain import ChainService
from nft_ledger.services.errors import (
    AlreadyClosed,
    Expired,
    MarketplaceNotApproved,
    StaleListing,
    Unauthorized,
)
from nft_ledger.services.marketplace import MarketplaceService
from nft_ledger.services.registry import TokenRegistryService
from nft_ledger.services.royalties import RoyaltyService

COLLECTION = "deployer.nft-token"
MARKETPLACE = "deployer.marketplace"


def _listed_token(price: int = 1_000_000, expiry: int = 1000, approve: bool = True) -> int:
    with session_scope() as session:
        registry = TokenRegistryService(session)
        token = registry.mint(COLLECTION, "wallet_1", "ipfs://art", 500, caller="wallet_1")
        if approve:
            registry.approve(COLLECTION, token.token_id, MARKETPLACE, caller="wallet_1")
        listing = MarketplaceService(session).list_token(COLLECTION, token.token_id, price, expiry, caller="wallet_1")
        return listing.listing_id


def _sync_height(height: int) -> None:
    with session_scope() as session:
        ChainService(session).sync_to(height, caller="deployer")


def test_end_to_end_purchase_splits_price_and_moves_ownership(client: TestClient) -> None:
    mint_resp = client.post(
        "/api/v1/collections/deployer.nft-token/tokens",
        json={"recipient": "wallet_1", "content_uri": "ipfs://art", "royalty_bps": 500},
        headers={"X-Actor-Id": "wallet_1"},
    )
    mint_resp.raise_for_status()
    client.post(
        f"/api/v1/collections/{COLLECTION}/tokens/1/approve",
        json={"spender": MARKETPLACE},
        headers={"X-Actor-Id": "wallet_1"},
    ).raise_for_status()

    listing_resp = client.post(
        "/api/v1/marketplace/listings",
        json={"token_contract": COLLECTION, "token_id": 1, "price": 1_000_000, "expiry": 1000},
        headers={"X-Actor-Id": "wallet_1"},
    )
    listing_resp.raise_for_status()
    assert listing_resp.json()["listing_id"] == 1

    buy_resp = client.post("/api/v1/marketplace/listings/1/buy", headers={"X-Actor-Id": "wallet_2"})
    buy_resp.raise_for_status()
    sale = buy_resp.json()
    assert sale["platform_fee"] == 25_000
    assert sale["royalty"] == 50_000
    assert sale["seller_amount"] == 925_000
    assert sale["platform_fee"] + sale["royalty"] + sale["seller_amount"] == sale["price"]
    assert sale["royalty_recipient"] == "wallet_1"
    assert sale["fee_recipient"] == "deployer"

    owner = client.get(f"/api/v1/collections/{COLLECTION}/tokens/1/owner").json()
    assert owner["owner"] == "wallet_2"

    listing = client.get("/api/v1/marketplace/listings/1").json()
    assert listing["active"] is False
    assert listing["closed_reason"] == "bought"
    assert listing["buyer"] == "wallet_2"

    earnings = client.get("/api/v1/royalties/earnings/wallet_1").json()
    assert earnings["total"] == 50_000

    history = client.get(f"/api/v1/marketplace/tokens/{COLLECTION}/1/history").json()
    assert [item["sale_id"] for item in history] == [1]

    token = client.get(f"/api/v1/collections/{COLLECTION}/tokens/1").json()
    assert token["approved_spender"] is None


def test_expiry_boundary_is_inclusive() -> None:
    first = _listed_token(expiry=10)
    second = _listed_token(expiry=10)

    _sync_height(10)
    with session_scope() as session:
        settlement = MarketplaceService(session).buy(first, caller="wallet_2")
        assert settlement.buyer == "wallet_2"

    _sync_height(11)
    with pytest.raises(Expired):
        with session_scope() as session:
            MarketplaceService(session).buy(second, caller="wallet_2")

    with session_scope() as session:
        listing = MarketplaceService(session).get_listing(second)
        # Expiry is logical; the listing stays active.
        assert listing.active is True


def test_second_purchase_of_same_listing_is_rejected() -> None:
    listing_id = _listed_token()
    with session_scope() as session:
        MarketplaceService(session).buy(listing_id, caller="wallet_2")

    with pytest.raises(AlreadyClosed):
        with session_scope() as session:
            MarketplaceService(session).buy(listing_id, caller="wallet_3")


def test_buy_requires_marketplace_approval() -> None:
    listing_id = _listed_token(approve=False)
    with pytest.raises(MarketplaceNotApproved):
        with session_scope() as session:
            MarketplaceService(session).buy(listing_id, caller="wallet_2")


def test_stale_listing_after_transfer() -> None:
    listing_id = _listed_token()
    with session_scope() as session:
        TokenRegistryService(session).transfer(COLLECTION, 1, "wallet_1", "wallet_5", caller="wallet_1")

    with pytest.raises(StaleListing):
        with session_scope() as session:
            MarketplaceService(session).buy(listing_id, caller="wallet_2")

    with session_scope() as session:
        assert TokenRegistryService(session).get_owner(COLLECTION, 1) == "wallet_5"


def test_failed_settlement_leaves_no_partial_state(monkeypatch) -> None:
    listing_id = _listed_token()

    def _explode(self, token, recipient, *, actor, reason):
        raise RuntimeError("registry unavailable")

    monkeypatch.setattr(TokenRegistryService, "move_token", _explode)
    with pytest.raises(RuntimeError):
        with session_scope() as session:
            MarketplaceService(session).buy(listing_id, caller="wallet_2")
    monkeypatch.undo()

    with session_scope() as session:
        assert RoyaltyService(session).get_creator_earnings("wallet_1") == 0
        assert TokenRegistryService(session).get_owner(COLLECTION, 1) == "wallet_1"
        assert MarketplaceService(session).get_listing(listing_id).active is True
        assert session.scalars(select(Sale)).all() == []


def test_rolled_back_settlement_publishes_no_events(monkeypatch, event_dispatcher_stub) -> None:
    listing_id = _listed_token()
    published = event_dispatcher_stub.stub_publisher.envelopes
    published.clear()

    def _explode(self, token, recipient, *, actor, reason):
        raise RuntimeError("registry unavailable")

    monkeypatch.setattr(TokenRegistryService, "move_token", _explode)
    with pytest.raises(RuntimeError):
        with session_scope() as session:
            MarketplaceService(session).buy(listing_id, caller="wallet_2")
    monkeypatch.undo()

    assert published == []
    with session_scope() as session:
        events = session.scalars(select(PlatformEvent.event_type)).all()
        assert "royalty.distributed" not in events

    with session_scope() as session:
        MarketplaceService(session).buy(listing_id, caller="wallet_2")
    assert [envelope.event_type for envelope in published] == [
        "royalty.distributed",
        "token.transferred",
        "listing.purchased",
    ]


def test_buying_listing_of_burned_token_is_stale() -> None:
    listing_id = _listed_token()
    with session_scope() as session:
        TokenRegistryService(session).burn(COLLECTION, 1, caller="wallet_1")

    with pytest.raises(StaleListing):
        with session_scope() as session:
            MarketplaceService(session).buy(listing_id, caller="wallet_2")

    with session_scope() as session:
        assert MarketplaceService(session).get_listing(listing_id).active is True
        assert session.scalars(select(Sale)).all() == []
        assert RoyaltyService(session).get_creator_earnings("wallet_1") == 0


def test_largest_64_bit_price_settles() -> None:
    price = MAX_LEDGER_INT
    listing_id = _listed_token(price=price)

    with session_scope() as session:
        settlement = MarketplaceService(session).buy(listing_id, caller="wallet_2")
        assert settlement.platform_fee + settlement.royalty + settlement.seller_amount == price
        assert settlement.sale.price == price


def test_royalty_override_receives_sale_royalty() -> None:
    listing_id = _listed_token()
    with session_scope() as session:
        RoyaltyService(session).set_token_royalty(COLLECTION, 1, "estate", 1000, caller="deployer")

    with session_scope() as session:
        settlement = MarketplaceService(session).buy(listing_id, caller="wallet_2")
        assert settlement.royalty == 100_000
        assert settlement.royalty_recipient == "estate"
        assert settlement.seller_amount == 875_000

    with session_scope() as session:
        royalties = RoyaltyService(session)
        assert royalties.get_creator_earnings("estate") == 100_000
        assert royalties.get_creator_earnings("wallet_1") == 0


def test_accept_offer_settles_to_offer_buyer() -> None:
    with session_scope() as session:
        TokenRegistryService(session).mint(COLLECTION, "wallet_1", "ipfs://art", 500, caller="wallet_1")
        offer = MarketplaceService(session).make_offer(COLLECTION, 1, 200_000, 50, caller="wallet_2")
        offer_id = offer.offer_id

    with pytest.raises(Unauthorized):
        with session_scope() as session:
            MarketplaceService(session).accept_offer(offer_id, caller="wallet_2")

    with session_scope() as session:
        settlement = MarketplaceService(session).accept_offer(offer_id, caller="wallet_1")
        assert (settlement.platform_fee, settlement.royalty, settlement.seller_amount) == (5_000, 10_000, 185_000)
        assert settlement.sale.offer_id == offer_id

    with session_scope() as session:
        market = MarketplaceService(session)
        assert TokenRegistryService(session).get_owner(COLLECTION, 1) == "wallet_2"
        offer = market.get_offer(offer_id)
        assert offer.active is False
        assert offer.closed_reason.value == "accepted"

    with pytest.raises(AlreadyClosed):
        with session_scope() as session:
            MarketplaceService(session).accept_offer(offer_id, caller="wallet_2")


def test_accept_offer_past_expiry_is_rejected() -> None:
    with session_scope() as session:
        TokenRegistryService(session).mint(COLLECTION, "wallet_1", "ipfs://art", 0, caller="wallet_1")
        offer_id = MarketplaceService(session).make_offer(COLLECTION, 1, 1_000, 5, caller="wallet_2").offer_id

    _sync_height(6)
    with pytest.raises(Expired):
        with session_scope() as session:
            MarketplaceService(session).accept_offer(offer_id, caller="wallet_1")
