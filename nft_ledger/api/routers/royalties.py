"""Royalty and platform fee HTTP endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from nft_ledger.api.dependencies import LedgerId, get_royalty_reader, get_royalty_service, require_caller
from nft_ledger.schemas.royalty import (
    CreatorEarningsResponse,
    DistributePaymentRequest,
    DistributePaymentSimpleRequest,
    DistributionResponse,
    EffectiveRoyaltyResponse,
    PaymentDistributionResponse,
    PlatformFeeAmountResponse,
    PlatformFeeInfoResponse,
    PlatformFeeUpdate,
    RoyaltyAmountResponse,
    RoyaltyRecordResponse,
    RoyaltyToggleResponse,
    TokenRoyaltyUpdate,
)
from nft_ledger.services.royalties import PaymentDistribution, RoyaltyService, calculate_royalty

router = APIRouter()


def _payment_response(amount: int, payment: PaymentDistribution) -> PaymentDistributionResponse:
    distribution = payment.distribution
    return PaymentDistributionResponse(
        amount=amount,
        platform_fee=distribution.platform_fee,
        royalty=distribution.royalty,
        seller_amount=distribution.seller_amount,
        seller=payment.seller,
        fee_recipient=payment.fee_recipient,
        royalty_recipient=payment.royalty_recipient,
        royalty_bps=payment.royalty_bps,
    )


@router.get(
    "/calculate",
    response_model=RoyaltyAmountResponse,
)
def calculate(
    amount: int = Query(..., ge=0),
    rate_bps: int = Query(..., ge=0),
) -> RoyaltyAmountResponse:
    return RoyaltyAmountResponse(amount=amount, rate_bps=rate_bps, royalty=calculate_royalty(amount, rate_bps))


@router.get(
    "/distribution",
    response_model=DistributionResponse,
)
def calculate_distribution(
    amount: int = Query(..., ge=0),
    rate_bps: int = Query(...),
    service: RoyaltyService = Depends(get_royalty_reader),
) -> DistributionResponse:
    distribution = service.calculate_distribution(amount, rate_bps)
    return DistributionResponse(
        amount=amount,
        platform_fee=distribution.platform_fee,
        royalty=distribution.royalty,
        seller_amount=distribution.seller_amount,
    )


@router.get(
    "/platform-fee",
    response_model=PlatformFeeAmountResponse,
)
def calculate_platform_fee(
    amount: int = Query(..., ge=0),
    service: RoyaltyService = Depends(get_royalty_reader),
) -> PlatformFeeAmountResponse:
    return PlatformFeeAmountResponse(amount=amount, platform_fee=service.calculate_platform_fee(amount))


@router.get(
    "/platform-fee/info",
    response_model=PlatformFeeInfoResponse,
)
def get_platform_fee_info(
    service: RoyaltyService = Depends(get_royalty_reader),
) -> PlatformFeeInfoResponse:
    return PlatformFeeInfoResponse.model_validate(service.get_platform_fee_info(), from_attributes=True)


@router.put(
    "/platform-fee",
    response_model=PlatformFeeInfoResponse,
)
def set_platform_fee(
    payload: PlatformFeeUpdate,
    caller: str = Depends(require_caller),
    service: RoyaltyService = Depends(get_royalty_service),
) -> PlatformFeeInfoResponse:
    info = service.set_platform_fee(payload.fee_bps, caller=caller)
    return PlatformFeeInfoResponse.model_validate(info, from_attributes=True)


@router.post(
    "/toggle",
    response_model=RoyaltyToggleResponse,
)
def toggle_royalty_system(
    caller: str = Depends(require_caller),
    service: RoyaltyService = Depends(get_royalty_service),
) -> RoyaltyToggleResponse:
    return RoyaltyToggleResponse(enabled=service.toggle_royalty_system(caller=caller))


@router.put(
    "/collections/{token_contract}",
    response_model=RoyaltyRecordResponse,
)
def set_collection_default_royalty(
    token_contract: str,
    payload: TokenRoyaltyUpdate,
    caller: str = Depends(require_caller),
    service: RoyaltyService = Depends(get_royalty_service),
) -> RoyaltyRecordResponse:
    record = service.set_collection_default_royalty(token_contract, payload.recipient, payload.rate_bps, caller=caller)
    return RoyaltyRecordResponse.model_validate(record, from_attributes=True)


@router.get(
    "/collections/{token_contract}",
    response_model=Optional[RoyaltyRecordResponse],
)
def get_collection_royalty(
    token_contract: str,
    service: RoyaltyService = Depends(get_royalty_reader),
) -> Optional[RoyaltyRecordResponse]:
    record = service.get_collection_royalty(token_contract)
    return RoyaltyRecordResponse.model_validate(record, from_attributes=True) if record else None


@router.put(
    "/collections/{token_contract}/tokens/{token_id}",
    response_model=RoyaltyRecordResponse,
)
def set_token_royalty(
    token_contract: str,
    token_id: LedgerId,
    payload: TokenRoyaltyUpdate,
    caller: str = Depends(require_caller),
    service: RoyaltyService = Depends(get_royalty_service),
) -> RoyaltyRecordResponse:
    record = service.set_token_royalty(token_contract, token_id, payload.recipient, payload.rate_bps, caller=caller)
    return RoyaltyRecordResponse.model_validate(record, from_attributes=True)


@router.get(
    "/collections/{token_contract}/tokens/{token_id}",
    response_model=Optional[RoyaltyRecordResponse],
)
def get_token_royalty_record(
    token_contract: str,
    token_id: LedgerId,
    service: RoyaltyService = Depends(get_royalty_reader),
) -> Optional[RoyaltyRecordResponse]:
    record = service.get_token_royalty(token_contract, token_id)
    return RoyaltyRecordResponse.model_validate(record, from_attributes=True) if record else None


@router.get(
    "/collections/{token_contract}/tokens/{token_id}/effective",
    response_model=EffectiveRoyaltyResponse,
)
def get_effective_royalty(
    token_contract: str,
    token_id: LedgerId,
    service: RoyaltyService = Depends(get_royalty_reader),
) -> EffectiveRoyaltyResponse:
    return EffectiveRoyaltyResponse.model_validate(
        service.effective_royalty(token_contract, token_id),
        from_attributes=True,
    )


@router.post(
    "/distribute",
    response_model=PaymentDistributionResponse,
)
def distribute_payment(
    payload: DistributePaymentRequest,
    caller: str = Depends(require_caller),
    service: RoyaltyService = Depends(get_royalty_service),
) -> PaymentDistributionResponse:
    payment = service.distribute_payment(
        payload.token_contract,
        payload.token_id,
        payload.amount,
        payload.seller,
        payload.buyer,
        caller=caller,
    )
    return _payment_response(payload.amount, payment)


@router.post(
    "/distribute-simple",
    response_model=PaymentDistributionResponse,
)
def distribute_payment_simple(
    payload: DistributePaymentSimpleRequest,
    caller: str = Depends(require_caller),
    service: RoyaltyService = Depends(get_royalty_service),
) -> PaymentDistributionResponse:
    payment = service.distribute_payment_simple(
        payload.amount,
        payload.seller,
        payload.creator,
        payload.rate_bps,
        caller=caller,
    )
    return _payment_response(payload.amount, payment)


@router.get(
    "/earnings/{principal}",
    response_model=CreatorEarningsResponse,
)
def get_creator_earnings(
    principal: str,
    service: RoyaltyService = Depends(get_royalty_reader),
) -> CreatorEarningsResponse:
    return CreatorEarningsResponse(principal=principal, total=service.get_creator_earnings(principal))
