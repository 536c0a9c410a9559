"""Events engine: outbox persistence and fan-out of ledger events."""

from .dispatcher import EventDispatcher, get_event_dispatcher  # noqa: F401
from .schemas import EventEnvelope  # noqa: F401
