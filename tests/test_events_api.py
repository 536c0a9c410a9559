from __future__ import annotations

from fastapi.testclient import TestClient


def test_mutations_are_published_and_listed(client: TestClient, event_dispatcher_stub, minted_token: dict) -> None:
    published = [envelope.event_type for envelope in event_dispatcher_stub.stub_publisher.envelopes]
    assert published == ["token.minted"]
    envelope = event_dispatcher_stub.stub_publisher.envelopes[0]
    assert envelope.payload["token_id"] == 1
    assert envelope.payload["recipient"] == "wallet_1"

    list_resp = client.get("/api/v1/events", params={"event_type": "token.minted"})
    list_resp.raise_for_status()
    events = list_resp.json()
    assert len(events) == 1
    assert events[0]["delivery_state"] == "succeeded"
    assert events[0]["block_height"] == 0

    detail_resp = client.get(f"/api/v1/events/{events[0]['event_id']}")
    detail_resp.raise_for_status()
    assert detail_resp.json()["payload"]["token_contract"] == "deployer.nft-token"

    missing = client.get("/api/v1/events/does-not-exist")
    assert missing.status_code == 404


def test_failed_request_publishes_nothing(client: TestClient, event_dispatcher_stub) -> None:
    response = client.post(
        "/api/v1/collections/deployer.nft-token/tokens",
        json={"recipient": "wallet_1", "content_uri": "", "royalty_bps": 0},
        headers={"X-Actor-Id": "wallet_1"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_URI"
    assert event_dispatcher_stub.stub_publisher.envelopes == []
    assert client.get("/api/v1/events").json() == []
