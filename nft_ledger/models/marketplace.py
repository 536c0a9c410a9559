"""Marketplace tables: listings, offers, settled sales and marketplace state."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, Boolean, Index, Integer, String
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column

from nft_ledger.models.base import Base, TimestampMixin
from nft_ledger.models.types import PRINCIPAL_LENGTH


class ListingCloseReason(str, Enum):
    BOUGHT = "bought"
    UNLISTED = "unlisted"


class OfferCloseReason(str, Enum):
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class Listing(TimestampMixin, Base):
    """Fixed-price sale listing. Ids are sequential and never reused."""

    __tablename__ = "listings"
    __table_args__ = (
        Index("ix_listings_token", "token_contract", "token_id"),
        Index("ix_listings_active", "active"),
        {"sqlite_autoincrement": True},
    )

    listing_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_contract: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    token_id: Mapped[int] = mapped_column(Integer, nullable=False)
    seller: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expiry: Mapped[int] = mapped_column(BigInteger, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at_block: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    closed_reason: Mapped[Optional[ListingCloseReason]] = mapped_column(
        SqlEnum(ListingCloseReason, name="listing_close_reason", native_enum=False),
        nullable=True,
    )
    buyer: Mapped[Optional[str]] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=True)


class Offer(TimestampMixin, Base):
    """Standing bid on a token, independent of any listing."""

    __tablename__ = "offers"
    __table_args__ = (
        Index("ix_offers_token", "token_contract", "token_id"),
        {"sqlite_autoincrement": True},
    )

    offer_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_contract: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    token_id: Mapped[int] = mapped_column(Integer, nullable=False)
    buyer: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expiry: Mapped[int] = mapped_column(BigInteger, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at_block: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    closed_reason: Mapped[Optional[OfferCloseReason]] = mapped_column(
        SqlEnum(OfferCloseReason, name="offer_close_reason", native_enum=False),
        nullable=True,
    )


class Sale(TimestampMixin, Base):
    """Immutable record of one settlement and how the price was split."""

    __tablename__ = "sales"
    __table_args__ = (
        Index("ix_sales_token", "token_contract", "token_id"),
        {"sqlite_autoincrement": True},
    )

    sale_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    offer_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    token_contract: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    token_id: Mapped[int] = mapped_column(Integer, nullable=False)
    seller: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    buyer: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    platform_fee: Mapped[int] = mapped_column(BigInteger, nullable=False)
    fee_recipient: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    royalty: Mapped[int] = mapped_column(BigInteger, nullable=False)
    royalty_recipient: Mapped[Optional[str]] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=True)
    seller_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    block_height: Mapped[int] = mapped_column(BigInteger, nullable=False)


class MarketplaceState(TimestampMixin, Base):
    """Singleton row holding marketplace administration and the block counter."""

    __tablename__ = "marketplace_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    owner: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    operator: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    block_height: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
