"""Shared plumbing for services that mutate the ledger."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from nft_ledger.events_engine import EventDispatcher, get_event_dispatcher
from nft_ledger.models.marketplace import MarketplaceState
from nft_ledger.services.journal import JournalService


class LedgerService:
    """Base for registry, marketplace and royalty services.

    Subclasses validate every precondition before their first write and then
    call :meth:`_commit_record` so the journal entry and outbox event land in the
    same transaction as the state change.
    """

    logger_name = "nft_ledger.services"

    def __init__(
        self,
        session: Session,
        journal: Optional[JournalService] = None,
        event_dispatcher: Optional[EventDispatcher] = None,
    ) -> None:
        self._session = session
        self._journal = journal or JournalService(session)
        self._events = event_dispatcher or get_event_dispatcher()
        self._logger = logging.getLogger(self.logger_name)

    def _block_height(self) -> int:
        state = self._session.get(MarketplaceState, 1)
        return state.block_height if state else 0

    def _commit_record(
        self,
        *,
        action: str,
        actor: Optional[str],
        subject_type: str,
        subject_id: str,
        details: Dict[str, Any],
        block_height: Optional[int] = None,
    ) -> None:
        height = self._block_height() if block_height is None else block_height
        entry = self._journal.record(
            action=action,
            actor=actor,
            subject_type=subject_type,
            subject_id=subject_id,
            block_height=height,
            details=details,
        )
        # Indexers order events by the journal sequence they were recorded under.
        self._events.publish_event(
            self._session,
            event_type=action,
            block_height=height,
            payload={"actor": actor, subject_type: subject_id, "journal_sequence": entry.sequence, **details},
        )
        self._logger.info(
            action.replace(".", "_"),
            extra={"actor": actor, "subject": f"{subject_type}:{subject_id}", "block_height": height},
        )
