import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("NFTL_ENVIRONMENT", "test")
os.environ.setdefault("NFTL_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("NFTL_EVENT_TOPIC_ARN", "")
os.environ.setdefault("NFTL_LOG_JSON", "false")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from nft_ledger.core.config import get_settings

get_settings.cache_clear()

from nft_ledger.core.database import engine, session_scope  # noqa: E402
from nft_ledger.events_engine.dispatcher import EventDispatcher, set_event_dispatcher  # noqa: E402
from nft_ledger.events_engine.publisher import NullEventPublisher  # noqa: E402
from nft_ledger.main import create_app  # noqa: E402
from nft_ledger.models import Base  # noqa: E402
from nft_ledger.services.bootstrap import ensure_ledger_initialized  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    set_event_dispatcher(EventDispatcher(publisher=NullEventPublisher(), default_source="nft_ledger", max_attempts=2))
    with session_scope() as session:
        ensure_ledger_initialized(session, get_settings())
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client() -> TestClient:  # noqa: ANN001
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def event_dispatcher_stub():
    class StubPublisher:
        def __init__(self) -> None:
            self.envelopes = []

        def publish(self, envelope):
            self.envelopes.append(envelope)

    publisher = StubPublisher()
    dispatcher = EventDispatcher(publisher=publisher, default_source="nft_ledger", max_attempts=2)
    dispatcher.stub_publisher = publisher  # type: ignore[attr-defined]
    set_event_dispatcher(dispatcher)
    yield dispatcher
    set_event_dispatcher(EventDispatcher(publisher=NullEventPublisher(), default_source="nft_ledger", max_attempts=2))


@pytest.fixture()
def minted_token(client: TestClient) -> dict:
    """Token #1 of the default collection, minted to wallet_1 at 5% royalty."""

    response = client.post(
        "/api/v1/collections/deployer.nft-token/tokens",
        json={"recipient": "wallet_1", "content_uri": "ipfs://token-1", "royalty_bps": 500},
        headers={"X-Actor-Id": "wallet_1"},
    )
    response.raise_for_status()
    return response.json()
