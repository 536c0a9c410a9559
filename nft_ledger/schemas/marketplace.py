"""Marketplace API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from nft_ledger.models.marketplace import ListingCloseReason, OfferCloseReason
from nft_ledger.models.types import MAX_LEDGER_INT


class ListingCreate(BaseModel):
    token_contract: str = Field(..., min_length=1, max_length=150)
    token_id: int = Field(..., le=MAX_LEDGER_INT)
    price: int
    expiry: int = Field(
        ..., ge=0, le=MAX_LEDGER_INT, description="Last block height at which the listing can be bought."
    )


class ListingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    listing_id: int
    token_contract: str
    token_id: int
    seller: str
    price: int
    expiry: int
    active: bool
    created_at_block: int
    closed_reason: Optional[ListingCloseReason]
    buyer: Optional[str]


class OfferCreate(BaseModel):
    token_contract: str = Field(..., min_length=1, max_length=150)
    token_id: int = Field(..., le=MAX_LEDGER_INT)
    amount: int
    expiry: int = Field(
        ..., ge=0, le=MAX_LEDGER_INT, description="Last block height at which the offer can be accepted."
    )


class OfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    offer_id: int
    token_contract: str
    token_id: int
    buyer: str
    amount: int
    expiry: int
    active: bool
    created_at_block: int
    closed_reason: Optional[OfferCloseReason]


class SaleResponse(BaseModel):
    """One settled sale and the way its price was split."""

    model_config = ConfigDict(from_attributes=True)

    sale_id: int
    listing_id: Optional[int]
    offer_id: Optional[int]
    token_contract: str
    token_id: int
    seller: str
    buyer: str
    price: int
    platform_fee: int
    fee_recipient: str
    royalty: int
    royalty_recipient: Optional[str]
    seller_amount: int
    block_height: int
    created_at: datetime


class MarketplaceToggleResponse(BaseModel):
    enabled: bool


class FeeRecipientUpdate(BaseModel):
    recipient: str = Field(..., min_length=1, max_length=150)
