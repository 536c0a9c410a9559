"""Token registry API schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CollectionCreate(BaseModel):
    contract_id: str = Field(..., min_length=1, max_length=150)


class CollectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    contract_id: str
    owner: str
    minting_enabled: bool
    last_token_id: int


class MintRequest(BaseModel):
    recipient: str = Field(..., min_length=1, max_length=150)
    content_uri: str = Field(..., max_length=256)
    royalty_bps: int = Field(default=0)


class TransferRequest(BaseModel):
    sender: str = Field(..., min_length=1, max_length=150)
    recipient: str = Field(..., min_length=1, max_length=150)


class ApproveRequest(BaseModel):
    spender: str = Field(..., min_length=1, max_length=150)


class TokenResponse(BaseModel):
    """Token metadata. ``owner`` is null once the token is burned."""

    model_config = ConfigDict(from_attributes=True)

    contract_id: str
    token_id: int
    owner: Optional[str]
    creator: str
    content_uri: str
    royalty_bps: int
    approved_spender: Optional[str]
    burned: bool


class TokenOwnerResponse(BaseModel):
    token_id: int
    owner: Optional[str]


class TokenUriResponse(BaseModel):
    token_id: int
    content_uri: Optional[str]


class TokenRoyaltyResponse(BaseModel):
    token_id: int
    royalty_bps: Optional[int]


class MintingToggleResponse(BaseModel):
    contract_id: str
    minting_enabled: bool


class HoldingsResponse(BaseModel):
    contract_id: str
    principal: str
    token_ids: List[int]
    balance: int
