"""Marketplace HTTP endpoints: listings, offers and settlement."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from nft_ledger.api.dependencies import (
    LedgerId,
    get_marketplace_reader,
    get_marketplace_service,
    require_caller,
)
from nft_ledger.schemas.marketplace import (
    FeeRecipientUpdate,
    ListingCreate,
    ListingResponse,
    MarketplaceToggleResponse,
    OfferCreate,
    OfferResponse,
    SaleResponse,
)
from nft_ledger.schemas.royalty import PlatformFeeAmountResponse, PlatformFeeInfoResponse
from nft_ledger.services.marketplace import MarketplaceService

router = APIRouter()


@router.post(
    "/listings",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_listing(
    payload: ListingCreate,
    caller: str = Depends(require_caller),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> ListingResponse:
    listing = service.list_token(
        payload.token_contract,
        payload.token_id,
        payload.price,
        payload.expiry,
        caller=caller,
    )
    return ListingResponse.model_validate(listing, from_attributes=True)


@router.get(
    "/listings",
    response_model=List[ListingResponse],
)
def list_active_listings(
    token_contract: Optional[str] = Query(default=None, max_length=150),
    service: MarketplaceService = Depends(get_marketplace_reader),
) -> List[ListingResponse]:
    listings = service.active_listings(token_contract)
    return [ListingResponse.model_validate(listing, from_attributes=True) for listing in listings]


@router.get(
    "/listings/{listing_id}",
    response_model=ListingResponse,
)
def get_listing(
    listing_id: LedgerId,
    service: MarketplaceService = Depends(get_marketplace_reader),
) -> ListingResponse:
    listing = service.require_listing(listing_id)
    return ListingResponse.model_validate(listing, from_attributes=True)


@router.post(
    "/listings/{listing_id}/unlist",
    response_model=ListingResponse,
)
def unlist(
    listing_id: LedgerId,
    caller: str = Depends(require_caller),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> ListingResponse:
    listing = service.unlist(listing_id, caller=caller)
    return ListingResponse.model_validate(listing, from_attributes=True)


@router.post(
    "/listings/{listing_id}/buy",
    response_model=SaleResponse,
)
def buy_listing(
    listing_id: LedgerId,
    caller: str = Depends(require_caller),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> SaleResponse:
    settlement = service.buy(listing_id, caller=caller)
    return SaleResponse.model_validate(settlement.sale, from_attributes=True)


@router.post(
    "/offers",
    response_model=OfferResponse,
    status_code=status.HTTP_201_CREATED,
)
def make_offer(
    payload: OfferCreate,
    caller: str = Depends(require_caller),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> OfferResponse:
    offer = service.make_offer(
        payload.token_contract,
        payload.token_id,
        payload.amount,
        payload.expiry,
        caller=caller,
    )
    return OfferResponse.model_validate(offer, from_attributes=True)


@router.get(
    "/offers/{offer_id}",
    response_model=OfferResponse,
)
def get_offer(
    offer_id: LedgerId,
    service: MarketplaceService = Depends(get_marketplace_reader),
) -> OfferResponse:
    offer = service.require_offer(offer_id)
    return OfferResponse.model_validate(offer, from_attributes=True)


@router.post(
    "/offers/{offer_id}/cancel",
    response_model=OfferResponse,
)
def cancel_offer(
    offer_id: LedgerId,
    caller: str = Depends(require_caller),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> OfferResponse:
    offer = service.cancel_offer(offer_id, caller=caller)
    return OfferResponse.model_validate(offer, from_attributes=True)


@router.post(
    "/offers/{offer_id}/reject",
    response_model=OfferResponse,
)
def reject_offer(
    offer_id: LedgerId,
    caller: str = Depends(require_caller),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> OfferResponse:
    offer = service.reject_offer(offer_id, caller=caller)
    return OfferResponse.model_validate(offer, from_attributes=True)


@router.post(
    "/offers/{offer_id}/accept",
    response_model=SaleResponse,
)
def accept_offer(
    offer_id: LedgerId,
    caller: str = Depends(require_caller),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> SaleResponse:
    settlement = service.accept_offer(offer_id, caller=caller)
    return SaleResponse.model_validate(settlement.sale, from_attributes=True)


@router.get(
    "/tokens/{token_contract}/{token_id}/offers",
    response_model=List[int],
)
def get_token_offers(
    token_contract: str,
    token_id: LedgerId,
    service: MarketplaceService = Depends(get_marketplace_reader),
) -> List[int]:
    return service.get_token_offers(token_contract, token_id)


@router.get(
    "/tokens/{token_contract}/{token_id}/history",
    response_model=List[SaleResponse],
)
def get_token_history(
    token_contract: str,
    token_id: LedgerId,
    service: MarketplaceService = Depends(get_marketplace_reader),
) -> List[SaleResponse]:
    return [SaleResponse.model_validate(sale, from_attributes=True) for sale in service.token_history(token_contract, token_id)]


@router.post(
    "/toggle",
    response_model=MarketplaceToggleResponse,
)
def toggle_marketplace(
    caller: str = Depends(require_caller),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> MarketplaceToggleResponse:
    return MarketplaceToggleResponse(enabled=service.toggle_marketplace(caller=caller))


@router.put(
    "/fee-recipient",
    response_model=PlatformFeeInfoResponse,
)
def set_fee_recipient(
    payload: FeeRecipientUpdate,
    caller: str = Depends(require_caller),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> PlatformFeeInfoResponse:
    info = service.set_platform_fee_recipient(payload.recipient, caller=caller)
    return PlatformFeeInfoResponse.model_validate(info, from_attributes=True)


@router.get(
    "/platform-fee",
    response_model=PlatformFeeAmountResponse,
)
def calculate_platform_fee(
    amount: int = Query(..., ge=0),
    service: MarketplaceService = Depends(get_marketplace_reader),
) -> PlatformFeeAmountResponse:
    return PlatformFeeAmountResponse(amount=amount, platform_fee=service.calculate_platform_fee(amount))
