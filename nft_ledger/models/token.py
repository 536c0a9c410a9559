"""Token registry tables: collections and the tokens minted in them."""

from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nft_ledger.models.base import Base, TimestampMixin
from nft_ledger.models.types import GUID, PRINCIPAL_LENGTH


class Collection(TimestampMixin, Base):
    """A token registry (one NFT contract) tracked by the ledger."""

    __tablename__ = "collections"
    __table_args__ = (UniqueConstraint("contract_id", name="uq_collections_contract_id"),)

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    contract_id: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    owner: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    minting_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_token_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tokens: Mapped[List["Token"]] = relationship(
        "Token",
        back_populates="collection",
        cascade="all, delete-orphan",
    )


class Token(TimestampMixin, Base):
    """A minted NFT. Metadata survives a burn; ownership does not."""

    __tablename__ = "tokens"
    __table_args__ = (
        UniqueConstraint("collection_id", "token_id", name="uq_tokens_collection_token"),
        Index("ix_tokens_owner", "owner"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    collection_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
    )
    token_id: Mapped[int] = mapped_column(Integer, nullable=False)
    owner: Mapped[Optional[str]] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=True)
    creator: Mapped[str] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=False)
    content_uri: Mapped[str] = mapped_column(String(length=256), nullable=False)
    royalty_bps: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    approved_spender: Mapped[Optional[str]] = mapped_column(String(length=PRINCIPAL_LENGTH), nullable=True)
    burned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    collection: Mapped[Collection] = relationship("Collection", back_populates="tokens")

    @property
    def contract_id(self) -> str:
        return self.collection.contract_id
