"""Hash-chained journal of committed ledger transactions."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from nft_ledger.models.base import Base, TimestampMixin
from nft_ledger.models.types import GUID, JSONType, PRINCIPAL_LENGTH


class JournalEntry(TimestampMixin, Base):
    """One committed mutation, anchored to its predecessor by hash."""

    __tablename__ = "journal_entries"
    __table_args__ = (
        Index("ix_journal_entries_actor", "actor"),
        Index("ix_journal_entries_subject", "subject_type", "subject_id"),
        Index("ix_journal_entries_action", "action"),
        Index("ix_journal_entries_sequence", "sequence", unique=True),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    sequence: Mapped[int] = mapped_column(BigInteger, nullable=False)
    previous_hash: Mapped[str] = mapped_column(String(length=128), nullable=False)
    entry_hash: Mapped[str] = mapped_column(String(length=128), nullable=False)
    hash_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    block_height: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    action: Mapped[str] = mapped_column(String(length=120), nullable=False)
    actor: Mapped[Optional[str]] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=True)
    subject_type: Mapped[Optional[str]] = mapped_column(String(length=64), nullable=True)
    subject_id: Mapped[Optional[str]] = mapped_column(String(length=PRINCIPAL_LENGTH + 24), nullable=True)
    details: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
