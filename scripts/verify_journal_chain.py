#!/usr/bin/env python
"""Check the ledger journal and event outbox for tampering.

Exit status is 0 when the checked range is consistent, 1 when verification
fails. The failing journal sequence is logged so an operator can compare it
with what indexers received.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from nft_ledger.core.config import get_settings
from nft_ledger.core.database import SessionLocal
from nft_ledger.core.logging import configure_logging
from nft_ledger.services.journal_verifier import JournalVerificationError, JournalVerifier

LOGGER = logging.getLogger("nft_ledger.scripts.verify_journal_chain")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify the ledger journal hash chain and event outbox.")
    parser.add_argument("--start-sequence", type=int, default=None, help="First journal sequence to check.")
    parser.add_argument("--end-sequence", type=int, default=None, help="Last journal sequence to check.")
    parser.add_argument(
        "--journal-only",
        action="store_true",
        help="Skip cross-checking outbox events against the journal.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(get_settings())

    # Verification only reads, so it does not take the ledger write lock.
    try:
        with SessionLocal() as session:
            result = JournalVerifier(session).verify(
                start_sequence=args.start_sequence,
                end_sequence=args.end_sequence,
                check_events=not args.journal_only,
            )
    except JournalVerificationError as exc:
        LOGGER.error("journal_verification_failed", extra={"sequence": exc.sequence, "error": str(exc)})
        return 1

    LOGGER.info(
        "journal_verified",
        extra={
            "start_sequence": result.start_sequence,
            "end_sequence": result.end_sequence,
            "entries_checked": result.checked,
            "events_checked": result.events_checked,
            "block_range": f"{result.first_block_height}-{result.last_block_height}",
        },
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
