"""Consistency checks over the ledger journal and the event outbox.

Three properties are checked for a range of journal sequences:

* every entry hashes to the stored value and links to its predecessor,
* block heights never move backwards along the chain,
* every outbox event recorded under a journal sequence in the range names the
  same action and block height as that journal entry.

The last check catches outbox rows that were edited, or journal entries that
were deleted, after indexers had already been told about them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from nft_ledger.models.journal import JournalEntry
from nft_ledger.models.platform_event import PlatformEvent
from nft_ledger.services.journal import (
    GENESIS_HASH,
    canonicalize_journal_payload,
    compute_journal_hash,
)


class JournalVerificationError(RuntimeError):
    """Raised when the journal or the outbox fails verification."""

    def __init__(self, message: str, *, sequence: int | None = None) -> None:
        super().__init__(message)
        self.sequence = sequence


@dataclass
class VerificationResult:
    checked: int
    start_sequence: int
    end_sequence: int
    first_block_height: int
    last_block_height: int
    events_checked: int = 0


class JournalVerifier:
    """Replays the journal hash chain and cross-checks the event outbox against it."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def verify(
        self,
        *,
        start_sequence: int | None = None,
        end_sequence: int | None = None,
        check_events: bool = True,
    ) -> VerificationResult:
        entries = self._load_entries(start_sequence, end_sequence)
        if not entries:
            return VerificationResult(
                checked=0,
                start_sequence=start_sequence or 0,
                end_sequence=end_sequence or 0,
                first_block_height=0,
                last_block_height=0,
            )

        previous_sequence, previous_hash, previous_height = self._anchor(entries[0].sequence)
        for entry in entries:
            if entry.sequence != previous_sequence + 1:
                raise JournalVerificationError(
                    f"Sequence gap detected. Expected {previous_sequence + 1}, found {entry.sequence}",
                    sequence=entry.sequence,
                )
            if entry.block_height < previous_height:
                raise JournalVerificationError(
                    f"Block height moved backwards at sequence {entry.sequence}: "
                    f"{previous_height} -> {entry.block_height}",
                    sequence=entry.sequence,
                )

            expected_hash = compute_journal_hash(previous_hash, self._canonical(entry, previous_hash))
            if entry.previous_hash != previous_hash or entry.entry_hash != expected_hash:
                raise JournalVerificationError(
                    f"Hash mismatch at sequence {entry.sequence}: expected {expected_hash}, stored {entry.entry_hash}",
                    sequence=entry.sequence,
                )

            previous_sequence = entry.sequence
            previous_hash = entry.entry_hash
            previous_height = entry.block_height

        events_checked = self._check_events(entries) if check_events else 0
        return VerificationResult(
            checked=len(entries),
            start_sequence=entries[0].sequence,
            end_sequence=entries[-1].sequence,
            first_block_height=entries[0].block_height,
            last_block_height=entries[-1].block_height,
            events_checked=events_checked,
        )

    def _load_entries(self, start_sequence: int | None, end_sequence: int | None) -> List[JournalEntry]:
        query = select(JournalEntry).order_by(JournalEntry.sequence.asc())
        if start_sequence is not None:
            query = query.where(JournalEntry.sequence >= start_sequence)
        if end_sequence is not None:
            query = query.where(JournalEntry.sequence <= end_sequence)
        return list(self._session.execute(query).scalars())

    def _anchor(self, first_sequence: int) -> tuple[int, str, int]:
        """Sequence, hash and block height the first checked entry must follow."""

        if first_sequence <= 1:
            return 0, GENESIS_HASH, 0
        previous = self._session.scalar(select(JournalEntry).where(JournalEntry.sequence == first_sequence - 1))
        if previous is None:
            raise JournalVerificationError(
                f"Missing journal entry for sequence {first_sequence - 1}", sequence=first_sequence - 1
            )
        return previous.sequence, previous.entry_hash, previous.block_height

    @staticmethod
    def _canonical(entry: JournalEntry, previous_hash: str) -> str:
        return canonicalize_journal_payload(
            sequence=entry.sequence,
            hash_version=entry.hash_version,
            action=entry.action,
            actor=entry.actor,
            subject_type=entry.subject_type,
            subject_id=entry.subject_id,
            block_height=entry.block_height,
            details=entry.details,
            occurred_at=entry.occurred_at,
            previous_hash=previous_hash,
        )

    def _check_events(self, entries: List[JournalEntry]) -> int:
        by_sequence: Dict[int, JournalEntry] = {entry.sequence: entry for entry in entries}
        first, last = entries[0].sequence, entries[-1].sequence

        checked = 0
        for event in self._session.execute(select(PlatformEvent)).scalars():
            sequence = (event.payload or {}).get("journal_sequence")
            if not isinstance(sequence, int) or not first <= sequence <= last:
                continue
            entry = by_sequence[sequence]
            if event.event_type != entry.action or event.block_height != entry.block_height:
                raise JournalVerificationError(
                    f"Event {event.event_id} ({event.event_type} at block {event.block_height}) does not match "
                    f"journal sequence {sequence} ({entry.action} at block {entry.block_height})",
                    sequence=sequence,
                )
            checked += 1
        return checked
