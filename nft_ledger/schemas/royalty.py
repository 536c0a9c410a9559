"""Royalty and platform fee API schemas."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from nft_ledger.models.types import MAX_LEDGER_INT


class DistributionResponse(BaseModel):
    """Split of one amount; the three parts always sum to ``amount``."""

    model_config = ConfigDict(from_attributes=True)

    amount: int
    platform_fee: int
    royalty: int
    seller_amount: int


class RoyaltyAmountResponse(BaseModel):
    amount: int
    rate_bps: int
    royalty: int


class PlatformFeeAmountResponse(BaseModel):
    amount: int
    platform_fee: int


class PlatformFeeInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    fee_bps: int
    recipient: str
    enabled: bool


class PlatformFeeUpdate(BaseModel):
    fee_bps: int


class RoyaltyToggleResponse(BaseModel):
    enabled: bool


class TokenRoyaltyUpdate(BaseModel):
    recipient: str = Field(..., min_length=1, max_length=150)
    rate_bps: int


class RoyaltyRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token_contract: str
    token_id: Optional[int]
    recipient: str
    rate_bps: int


class EffectiveRoyaltyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    recipient: Optional[str]
    rate_bps: int
    source: Literal["token", "collection", "mint", "none"]


class DistributePaymentRequest(BaseModel):
    token_contract: str = Field(..., min_length=1, max_length=150)
    token_id: int = Field(..., le=MAX_LEDGER_INT)
    amount: int
    seller: str = Field(..., min_length=1, max_length=150)
    buyer: str = Field(..., min_length=1, max_length=150)


class DistributePaymentSimpleRequest(BaseModel):
    amount: int
    seller: str = Field(..., min_length=1, max_length=150)
    creator: str = Field(..., min_length=1, max_length=150)
    rate_bps: int


class PaymentDistributionResponse(BaseModel):
    amount: int
    platform_fee: int
    royalty: int
    seller_amount: int
    seller: str
    fee_recipient: str
    royalty_recipient: Optional[str]
    royalty_bps: int


class CreatorEarningsResponse(BaseModel):
    principal: str
    total: int
