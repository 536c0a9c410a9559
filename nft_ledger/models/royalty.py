"""Royalty tables, creator earnings and the platform fee configuration."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import BigInteger, Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from nft_ledger.models.base import Base, TimestampMixin
from nft_ledger.models.types import GUID, PRINCIPAL_LENGTH


class RoyaltyRecord(TimestampMixin, Base):
    """Royalty recipient and rate for one token, or a collection default when token_id is NULL."""

    __tablename__ = "royalty_records"
    __table_args__ = (Index("ix_royalty_records_token", "token_contract", "token_id"),)

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    token_contract: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    token_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    recipient: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    rate_bps: Mapped[int] = mapped_column(Integer, nullable=False)


class CreatorEarning(TimestampMixin, Base):
    """Cumulative royalty credited to a creator."""

    __tablename__ = "creator_earnings"

    principal: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), primary_key=True)
    total: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class PlatformFeeConfig(TimestampMixin, Base):
    """Singleton fee configuration; `royalty_enabled` is the royalty-system switch."""

    __tablename__ = "platform_fee_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    owner: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    fee_bps: Mapped[int] = mapped_column(Integer, nullable=False, default=250)
    recipient: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    royalty_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
