"""Hash-chained transaction journal."""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from nft_ledger.models.journal import JournalEntry

GENESIS_HASH = "0" * 64
HASH_VERSION = 1


def canonicalize_journal_payload(
    *,
    sequence: int,
    hash_version: int,
    action: str,
    actor: Optional[str],
    subject_type: Optional[str],
    subject_id: Optional[str],
    block_height: int,
    details: Dict[str, Any],
    occurred_at: datetime,
    previous_hash: str,
) -> str:
    if occurred_at.tzinfo is None:
        occurred_at = occurred_at.replace(tzinfo=timezone.utc)
    payload = {
        "sequence": sequence,
        "hash_version": hash_version,
        "action": action,
        "actor": actor,
        "subject_type": subject_type,
        "subject_id": subject_id,
        "block_height": block_height,
        "details": details,
        "occurred_at": occurred_at.astimezone(timezone.utc).isoformat(),
        "previous_hash": previous_hash,
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def compute_journal_hash(previous_hash: str, canonical_payload: str) -> str:
    return hashlib.sha256((previous_hash + canonical_payload).encode("utf-8")).hexdigest()


class JournalService:
    """Appends committed mutations to the journal and mirrors them to structured logs."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger("nft_ledger.journal")

    def record(
        self,
        *,
        action: str,
        actor: Optional[str],
        subject_type: Optional[str] = None,
        subject_id: Optional[str] = None,
        block_height: int = 0,
        details: Optional[Dict[str, Any]] = None,
        occurred_at: Optional[datetime] = None,
    ) -> JournalEntry:
        """Write a journal entry anchored into the hash chain."""

        details = details or {}
        occurred_at = occurred_at or datetime.now(timezone.utc)
        previous_sequence, previous_hash = self._lock_chain_tip()
        next_sequence = previous_sequence + 1

        canonical_payload = canonicalize_journal_payload(
            sequence=next_sequence,
            hash_version=HASH_VERSION,
            action=action,
            actor=actor,
            subject_type=subject_type,
            subject_id=subject_id,
            block_height=block_height,
            details=details,
            occurred_at=occurred_at,
            previous_hash=previous_hash,
        )
        entry_hash = compute_journal_hash(previous_hash, canonical_payload)

        entry = JournalEntry(
            sequence=next_sequence,
            previous_hash=previous_hash,
            entry_hash=entry_hash,
            hash_version=HASH_VERSION,
            occurred_at=occurred_at,
            block_height=block_height,
            action=action,
            actor=actor,
            subject_type=subject_type,
            subject_id=subject_id,
            details=details,
        )
        self._session.add(entry)
        self._session.flush()

        self._logger.info(
            "journal_entry",
            extra={
                "sequence": next_sequence,
                "entry_hash": entry_hash,
                "action": action,
                "actor": actor,
                "subject": f"{subject_type}:{subject_id}" if subject_type else None,
                "block_height": block_height,
            },
        )
        return entry

    def _lock_chain_tip(self) -> tuple[int, str]:
        stmt = select(JournalEntry.sequence, JournalEntry.entry_hash).order_by(JournalEntry.sequence.desc()).limit(1)
        if self._session.get_bind().dialect.name != "sqlite":
            stmt = stmt.with_for_update(nowait=False)
        result = self._session.execute(stmt).first()
        if result is None:
            return 0, GENESIS_HASH
        sequence, entry_hash = result
        return int(sequence), str(entry_hash)
