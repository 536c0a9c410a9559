from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from nft_ledger.core.database import session_scope
from nft_ledger.services.errors import (
    CollectionExists,
    InvalidRoyalty,
    InvalidUri,
    MintingDisabled,
    NoSuchToken,
    NotTokenOwner,
    OwnerOnly,
)
from nft_ledger.services.registry import TokenRegistryService

COLLECTION = "deployer.nft-token"


def _mint(session, recipient: str = "wallet_1", royalty_bps: int = 500) -> int:
    token = TokenRegistryService(session).mint(
        COLLECTION,
        recipient,
        f"ipfs://{recipient}",
        royalty_bps,
        caller=recipient,
    )
    return token.token_id


def test_mint_assigns_sequential_ids_from_one() -> None:
    with session_scope() as session:
        first = _mint(session)
        second = _mint(session, recipient="wallet_2")
        third = _mint(session, royalty_bps=1000)

    assert (first, second, third) == (1, 2, 3)

    with session_scope() as session:
        registry = TokenRegistryService(session)
        assert registry.get_last_token_id(COLLECTION) == 3
        assert registry.get_owner(COLLECTION, 2) == "wallet_2"
        assert registry.get_token_royalty(COLLECTION, 3) == 1000


def test_mint_rejects_royalty_above_cap_without_consuming_an_id() -> None:
    with pytest.raises(InvalidRoyalty):
        with session_scope() as session:
            _mint(session, royalty_bps=1001)

    with session_scope() as session:
        assert TokenRegistryService(session).get_last_token_id(COLLECTION) == 0
        assert _mint(session) == 1


def test_mint_rejects_empty_uri() -> None:
    with pytest.raises(InvalidUri):
        with session_scope() as session:
            TokenRegistryService(session).mint(COLLECTION, "wallet_1", "", 0, caller="wallet_1")


def test_toggle_minting_is_owner_only_and_blocks_mint() -> None:
    with pytest.raises(OwnerOnly):
        with session_scope() as session:
            TokenRegistryService(session).toggle_minting(COLLECTION, caller="wallet_1")

    with session_scope() as session:
        assert TokenRegistryService(session).toggle_minting(COLLECTION, caller="deployer") is False

    with pytest.raises(MintingDisabled):
        with session_scope() as session:
            _mint(session)

    with session_scope() as session:
        assert TokenRegistryService(session).toggle_minting(COLLECTION, caller="deployer") is True
        assert _mint(session) == 1


def test_transfer_by_owner_and_by_approved_spender() -> None:
    with session_scope() as session:
        token_id = _mint(session)
        registry = TokenRegistryService(session)
        registry.transfer(COLLECTION, token_id, "wallet_1", "wallet_2", caller="wallet_1")
        assert registry.get_owner(COLLECTION, token_id) == "wallet_2"

        registry.approve(COLLECTION, token_id, "wallet_3", caller="wallet_2")
        assert registry.get_approved(COLLECTION, token_id) == "wallet_3"

        registry.transfer(COLLECTION, token_id, "wallet_2", "wallet_4", caller="wallet_3")
        assert registry.get_owner(COLLECTION, token_id) == "wallet_4"
        assert registry.get_approved(COLLECTION, token_id) is None


def test_transfer_by_stranger_is_rejected() -> None:
    with session_scope() as session:
        token_id = _mint(session)

    with pytest.raises(NotTokenOwner):
        with session_scope() as session:
            TokenRegistryService(session).transfer(COLLECTION, token_id, "wallet_1", "wallet_3", caller="wallet_3")

    with pytest.raises(NotTokenOwner):
        with session_scope() as session:
            TokenRegistryService(session).transfer(COLLECTION, token_id, "wallet_2", "wallet_3", caller="wallet_2")

    with session_scope() as session:
        assert TokenRegistryService(session).get_owner(COLLECTION, token_id) == "wallet_1"


def test_approve_requires_current_owner() -> None:
    with session_scope() as session:
        token_id = _mint(session)

    with pytest.raises(NotTokenOwner):
        with session_scope() as session:
            TokenRegistryService(session).approve(COLLECTION, token_id, "wallet_3", caller="wallet_2")


def test_burn_clears_owner_but_keeps_metadata() -> None:
    with session_scope() as session:
        token_id = _mint(session)
        registry = TokenRegistryService(session)
        registry.approve(COLLECTION, token_id, "wallet_2", caller="wallet_1")
        registry.burn(COLLECTION, token_id, caller="wallet_1")

        assert registry.get_owner(COLLECTION, token_id) is None
        assert registry.get_approved(COLLECTION, token_id) is None
        assert registry.get_token_uri(COLLECTION, token_id) == "ipfs://wallet_1"
        assert registry.get_token_royalty(COLLECTION, token_id) == 500

    with pytest.raises(NoSuchToken):
        with session_scope() as session:
            TokenRegistryService(session).transfer(COLLECTION, token_id, "wallet_1", "wallet_2", caller="wallet_1")

    with session_scope() as session:
        assert _mint(session) == token_id + 1


def test_reads_of_unminted_ids_return_none() -> None:
    with session_scope() as session:
        registry = TokenRegistryService(session)
        assert registry.get_owner(COLLECTION, 42) is None
        assert registry.get_token_uri(COLLECTION, 42) is None
        assert registry.get_token_royalty(COLLECTION, 42) is None


def test_register_collection_rejects_duplicates() -> None:
    with session_scope() as session:
        collection = TokenRegistryService(session).register_collection("artist.drops", caller="artist")
        assert collection.owner == "artist"

    with pytest.raises(CollectionExists):
        with session_scope() as session:
            TokenRegistryService(session).register_collection("artist.drops", caller="someone-else")


def test_registry_http_flow(client: TestClient, minted_token: dict) -> None:
    assert minted_token["token_id"] == 1
    assert minted_token["owner"] == "wallet_1"
    assert minted_token["creator"] == "wallet_1"

    owner_resp = client.get(f"/api/v1/collections/{COLLECTION}/tokens/1/owner")
    owner_resp.raise_for_status()
    assert owner_resp.json() == {"token_id": 1, "owner": "wallet_1"}
    # Reads are idempotent.
    assert client.get(f"/api/v1/collections/{COLLECTION}/tokens/1/owner").json() == owner_resp.json()

    transfer_resp = client.post(
        f"/api/v1/collections/{COLLECTION}/tokens/1/transfer",
        json={"sender": "wallet_1", "recipient": "wallet_2"},
        headers={"X-Actor-Id": "wallet_1"},
    )
    transfer_resp.raise_for_status()
    assert transfer_resp.json()["owner"] == "wallet_2"

    holdings = client.get(f"/api/v1/collections/{COLLECTION}/holders/wallet_2").json()
    assert holdings["token_ids"] == [1]
    assert holdings["balance"] == 1

    missing = client.get(f"/api/v1/collections/{COLLECTION}/tokens/9/uri")
    missing.raise_for_status()
    assert missing.json()["content_uri"] is None

    collection = client.get(f"/api/v1/collections/{COLLECTION}").json()
    assert collection["last_token_id"] == 1
    assert collection["owner"] == "deployer"


def test_registry_http_errors(client: TestClient, minted_token: dict) -> None:
    bad_royalty = client.post(
        f"/api/v1/collections/{COLLECTION}/tokens",
        json={"recipient": "wallet_1", "content_uri": "ipfs://x", "royalty_bps": 1500},
        headers={"X-Actor-Id": "wallet_1"},
    )
    assert bad_royalty.status_code == 400
    assert bad_royalty.json()["code"] == "INVALID_ROYALTY"

    stolen = client.post(
        f"/api/v1/collections/{COLLECTION}/tokens/1/transfer",
        json={"sender": "wallet_1", "recipient": "wallet_3"},
        headers={"X-Actor-Id": "wallet_3"},
    )
    assert stolen.status_code == 403
    assert stolen.json()["code"] == "NOT_TOKEN_OWNER"

    anonymous = client.post(
        f"/api/v1/collections/{COLLECTION}/tokens/1/burn",
    )
    assert anonymous.status_code == 401

    unknown = client.get("/api/v1/collections/nobody.nft/tokens/1")
    assert unknown.status_code == 404
    assert unknown.json()["code"] == "NO_SUCH_COLLECTION"
