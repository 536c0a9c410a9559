"""Configuration helpers for the events engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from nft_ledger.core.config import LedgerSettings, get_settings


@dataclass
class EventEngineConfig:
    """Resolved configuration values for the events engine."""

    topic_arn: Optional[str]
    source: str
    max_attempts: int = 2


def get_event_engine_config(settings: Optional[LedgerSettings] = None) -> EventEngineConfig:
    settings = settings or get_settings()
    return EventEngineConfig(topic_arn=settings.event_topic_arn, source=settings.event_source)
