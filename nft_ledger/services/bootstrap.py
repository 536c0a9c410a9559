"""Ledger bootstrap: seeds the singleton configuration rows and the default collection."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from nft_ledger.core.config import LedgerSettings
from nft_ledger.models.marketplace import MarketplaceState
from nft_ledger.models.royalty import PlatformFeeConfig
from nft_ledger.models.token import Collection

LOGGER = logging.getLogger("nft_ledger.services.bootstrap")


def ensure_ledger_initialized(session: Session, settings: LedgerSettings) -> None:
    """Create missing configuration rows. Existing rows are left untouched."""

    seeded = []

    if session.get(MarketplaceState, 1) is None:
        session.add(
            MarketplaceState(
                id=1,
                owner=settings.admin_principal,
                operator=settings.marketplace_principal,
                enabled=True,
                block_height=0,
            )
        )
        seeded.append("marketplace_state")

    if session.get(PlatformFeeConfig, 1) is None:
        session.add(
            PlatformFeeConfig(
                id=1,
                owner=settings.admin_principal,
                fee_bps=settings.default_platform_fee_bps,
                recipient=settings.fee_recipient,
                royalty_enabled=True,
            )
        )
        seeded.append("platform_fee_config")

    default_collection = session.scalar(
        select(Collection).where(Collection.contract_id == settings.default_collection)
    )
    if default_collection is None:
        session.add(
            Collection(
                contract_id=settings.default_collection,
                owner=settings.admin_principal,
                minting_enabled=True,
                last_token_id=0,
            )
        )
        seeded.append("default_collection")

    session.flush()

    if seeded:
        LOGGER.info(
            "ledger_bootstrapped",
            extra={
                "seeded": seeded,
                "admin_principal": settings.admin_principal,
                "default_collection": settings.default_collection,
            },
        )
