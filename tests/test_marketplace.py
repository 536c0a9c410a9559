from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from nft_ledger.core.database import session_scope
from nft_ledger.models.types import MAX_LEDGER_INT
from nft_ledger.services.errors import (
    AlreadyClosed,
    InvalidOffer,
    InvalidPrice,
    MarketplaceDisabled,
    NoSuchListing,
    NoSuchToken,
    NotTokenOwner,
    OwnerOnly,
    Unauthorized,
)
from nft_ledger.services.marketplace import MarketplaceService
from nft_ledger.services.registry import TokenRegistryService

COLLECTION = "deployer.nft-token"


@pytest.fixture()
def token_id() -> int:
    with session_scope() as session:
        token = TokenRegistryService(session).mint(COLLECTION, "wallet_1", "ipfs://one", 500, caller="wallet_1")
        return token.token_id


def test_list_validations(token_id: int) -> None:
    with pytest.raises(InvalidPrice):
        with session_scope() as session:
            MarketplaceService(session).list_token(COLLECTION, token_id, 0, 1000, caller="wallet_1")

    with pytest.raises(NotTokenOwner):
        with session_scope() as session:
            MarketplaceService(session).list_token(COLLECTION, token_id, 100, 1000, caller="wallet_2")

    with session_scope() as session:
        listing = MarketplaceService(session).list_token(COLLECTION, token_id, 100, 1000, caller="wallet_1")
        assert listing.listing_id == 1
        assert listing.active is True
        assert listing.seller == "wallet_1"


def test_relisting_keeps_older_listing_active(token_id: int) -> None:
    with session_scope() as session:
        service = MarketplaceService(session)
        service.list_token(COLLECTION, token_id, 100, 1000, caller="wallet_1")
        service.list_token(COLLECTION, token_id, 200, 1000, caller="wallet_1")
        assert [listing.listing_id for listing in service.active_listings()] == [1, 2]


def test_unlist_rules(token_id: int) -> None:
    with session_scope() as session:
        MarketplaceService(session).list_token(COLLECTION, token_id, 100, 1000, caller="wallet_1")

    with pytest.raises(NoSuchListing):
        with session_scope() as session:
            MarketplaceService(session).unlist(99, caller="wallet_1")

    with pytest.raises(Unauthorized):
        with session_scope() as session:
            MarketplaceService(session).unlist(1, caller="wallet_2")

    with session_scope() as session:
        listing = MarketplaceService(session).unlist(1, caller="wallet_1")
        assert listing.active is False
        assert listing.closed_reason.value == "unlisted"

    with pytest.raises(AlreadyClosed):
        with session_scope() as session:
            MarketplaceService(session).unlist(1, caller="wallet_1")


def test_offer_rules(token_id: int) -> None:
    with pytest.raises(InvalidOffer):
        with session_scope() as session:
            MarketplaceService(session).make_offer(COLLECTION, token_id, 0, 1000, caller="wallet_2")

    with pytest.raises(NoSuchToken):
        with session_scope() as session:
            MarketplaceService(session).make_offer(COLLECTION, 77, 100, 1000, caller="wallet_2")

    with session_scope() as session:
        service = MarketplaceService(session)
        first = service.make_offer(COLLECTION, token_id, 100, 1000, caller="wallet_2")
        second = service.make_offer(COLLECTION, token_id, 150, 1000, caller="wallet_3")
        assert (first.offer_id, second.offer_id) == (1, 2)
        assert service.get_token_offers(COLLECTION, token_id) == [1, 2]

    with pytest.raises(Unauthorized):
        with session_scope() as session:
            MarketplaceService(session).cancel_offer(1, caller="wallet_3")

    with session_scope() as session:
        offer = MarketplaceService(session).cancel_offer(1, caller="wallet_2")
        assert offer.closed_reason.value == "cancelled"

    with pytest.raises(AlreadyClosed):
        with session_scope() as session:
            MarketplaceService(session).cancel_offer(1, caller="wallet_2")

    with pytest.raises(Unauthorized):
        with session_scope() as session:
            MarketplaceService(session).reject_offer(2, caller="wallet_2")

    with session_scope() as session:
        service = MarketplaceService(session)
        offer = service.reject_offer(2, caller="wallet_1")
        assert offer.active is False
        assert offer.closed_reason.value == "rejected"
        # Closed offers stay in the per-token history.
        assert service.get_token_offers(COLLECTION, token_id) == [1, 2]


def test_toggle_marketplace_twice_restores_state(token_id: int) -> None:
    with pytest.raises(OwnerOnly):
        with session_scope() as session:
            MarketplaceService(session).toggle_marketplace(caller="wallet_1")

    with session_scope() as session:
        assert MarketplaceService(session).toggle_marketplace(caller="deployer") is False

    with pytest.raises(MarketplaceDisabled):
        with session_scope() as session:
            MarketplaceService(session).list_token(COLLECTION, token_id, 100, 1000, caller="wallet_1")

    with session_scope() as session:
        assert MarketplaceService(session).toggle_marketplace(caller="deployer") is True
        MarketplaceService(session).list_token(COLLECTION, token_id, 100, 1000, caller="wallet_1")


def test_set_platform_fee_recipient_is_owner_only() -> None:
    with pytest.raises(OwnerOnly):
        with session_scope() as session:
            MarketplaceService(session).set_platform_fee_recipient("wallet_1", caller="wallet_1")

    with session_scope() as session:
        info = MarketplaceService(session).set_platform_fee_recipient("treasury", caller="deployer")
        assert info.recipient == "treasury"


def test_marketplace_http_errors(client: TestClient, minted_token: dict) -> None:
    zero_price = client.post(
        "/api/v1/marketplace/listings",
        json={"token_contract": COLLECTION, "token_id": 1, "price": 0, "expiry": 1000},
        headers={"X-Actor-Id": "wallet_1"},
    )
    assert zero_price.status_code == 400
    assert zero_price.json()["code"] == "INVALID_PRICE"

    created = client.post(
        "/api/v1/marketplace/listings",
        json={"token_contract": COLLECTION, "token_id": 1, "price": 500, "expiry": 1000},
        headers={"X-Actor-Id": "wallet_1"},
    )
    assert created.status_code == 201
    listing_id = created.json()["listing_id"]

    not_seller = client.post(f"/api/v1/marketplace/listings/{listing_id}/unlist", headers={"X-Actor-Id": "wallet_2"})
    assert not_seller.status_code == 403
    assert not_seller.json()["code"] == "UNAUTHORIZED"

    client.post(
        f"/api/v1/marketplace/listings/{listing_id}/unlist", headers={"X-Actor-Id": "wallet_1"}
    ).raise_for_status()
    second = client.post(f"/api/v1/marketplace/listings/{listing_id}/unlist", headers={"X-Actor-Id": "wallet_1"})
    assert second.status_code == 409
    assert second.json()["code"] == "ALREADY_CLOSED"

    missing = client.get("/api/v1/marketplace/listings/404")
    assert missing.status_code == 404
    assert missing.json()["code"] == "NO_SUCH_LISTING"

    zero_offer = client.post(
        "/api/v1/marketplace/offers",
        json={"token_contract": COLLECTION, "token_id": 1, "amount": 0, "expiry": 1000},
        headers={"X-Actor-Id": "wallet_2"},
    )
    assert zero_offer.status_code == 400
    assert zero_offer.json()["code"] == "INVALID_OFFER"

    fee = client.get("/api/v1/marketplace/platform-fee", params={"amount": 1_000_000}).json()
    assert fee == {"amount": 1_000_000, "platform_fee": 25_000}

    toggled = client.post("/api/v1/marketplace/toggle", headers={"X-Actor-Id": "deployer"})
    assert toggled.json() == {"enabled": False}
    toggled = client.post("/api/v1/marketplace/toggle", headers={"X-Actor-Id": "deployer"})
    assert toggled.json() == {"enabled": True}


def test_amounts_beyond_64_bits_are_rejected(client: TestClient, minted_token: dict) -> None:
    too_large = MAX_LEDGER_INT + 1

    listing = client.post(
        "/api/v1/marketplace/listings",
        json={"token_contract": COLLECTION, "token_id": 1, "price": too_large, "expiry": 1000},
        headers={"X-Actor-Id": "wallet_1"},
    )
    assert listing.status_code == 400
    assert listing.json()["code"] == "INVALID_PRICE"

    offer = client.post(
        "/api/v1/marketplace/offers",
        json={"token_contract": COLLECTION, "token_id": 1, "amount": 2**64, "expiry": 1000},
        headers={"X-Actor-Id": "wallet_2"},
    )
    assert offer.status_code == 400
    assert offer.json()["code"] == "INVALID_OFFER"

    far_expiry = client.post(
        "/api/v1/marketplace/listings",
        json={"token_contract": COLLECTION, "token_id": 1, "price": 500, "expiry": too_large},
        headers={"X-Actor-Id": "wallet_1"},
    )
    assert far_expiry.status_code == 422

    missing = client.get(f"/api/v1/marketplace/listings/{too_large}")
    assert missing.status_code == 422

    boundary = client.post(
        "/api/v1/marketplace/listings",
        json={"token_contract": COLLECTION, "token_id": 1, "price": MAX_LEDGER_INT, "expiry": MAX_LEDGER_INT},
        headers={"X-Actor-Id": "wallet_1"},
    )
    assert boundary.status_code == 201
    assert boundary.json()["price"] == MAX_LEDGER_INT
    assert client.get("/api/v1/marketplace/listings").json()[0]["listing_id"] == boundary.json()["listing_id"]
