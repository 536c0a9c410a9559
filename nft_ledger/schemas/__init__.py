"""Pydantic schemas for API payloads."""

from nft_ledger.schemas.chain import BlockAdvanceRequest, ChainStateResponse
from nft_ledger.schemas.event import EventResponse
from nft_ledger.schemas.marketplace import (
    FeeRecipientUpdate,
    ListingCreate,
    ListingResponse,
    MarketplaceToggleResponse,
    OfferCreate,
    OfferResponse,
    SaleResponse,
)
from nft_ledger.schemas.royalty import (
    CreatorEarningsResponse,
    DistributePaymentRequest,
    DistributePaymentSimpleRequest,
    DistributionResponse,
    EffectiveRoyaltyResponse,
    PaymentDistributionResponse,
    PlatformFeeInfoResponse,
    PlatformFeeUpdate,
    RoyaltyRecordResponse,
    TokenRoyaltyUpdate,
)
from nft_ledger.schemas.token import (
    ApproveRequest,
    CollectionCreate,
    CollectionResponse,
    MintRequest,
    TokenResponse,
    TransferRequest,
)

__all__ = [
    "ApproveRequest",
    "BlockAdvanceRequest",
    "ChainStateResponse",
    "CollectionCreate",
    "CollectionResponse",
    "CreatorEarningsResponse",
    "DistributePaymentRequest",
    "DistributePaymentSimpleRequest",
    "DistributionResponse",
    "EffectiveRoyaltyResponse",
    "EventResponse",
    "FeeRecipientUpdate",
    "ListingCreate",
    "ListingResponse",
    "MarketplaceToggleResponse",
    "MintRequest",
    "OfferCreate",
    "OfferResponse",
    "PaymentDistributionResponse",
    "PlatformFeeInfoResponse",
    "PlatformFeeUpdate",
    "RoyaltyRecordResponse",
    "SaleResponse",
    "TokenResponse",
    "TokenRoyaltyUpdate",
    "TransferRequest",
]
