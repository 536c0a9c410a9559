"""Token registry HTTP endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from nft_ledger.api.dependencies import LedgerId, get_registry_reader, get_registry_service, require_caller
from nft_ledger.schemas.token import (
    ApproveRequest,
    CollectionCreate,
    CollectionResponse,
    HoldingsResponse,
    MintingToggleResponse,
    MintRequest,
    TokenOwnerResponse,
    TokenResponse,
    TokenRoyaltyResponse,
    TokenUriResponse,
    TransferRequest,
)
from nft_ledger.services.errors import NoSuchToken
from nft_ledger.services.registry import TokenRegistryService

router = APIRouter()


@router.post(
    "",
    response_model=CollectionResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_collection(
    payload: CollectionCreate,
    caller: str = Depends(require_caller),
    service: TokenRegistryService = Depends(get_registry_service),
) -> CollectionResponse:
    collection = service.register_collection(payload.contract_id, caller=caller)
    return CollectionResponse.model_validate(collection, from_attributes=True)


@router.get(
    "",
    response_model=List[CollectionResponse],
)
def list_collections(
    service: TokenRegistryService = Depends(get_registry_reader),
) -> List[CollectionResponse]:
    return [CollectionResponse.model_validate(item, from_attributes=True) for item in service.list_collections()]


@router.get(
    "/{contract_id}",
    response_model=CollectionResponse,
)
def get_collection(
    contract_id: str,
    service: TokenRegistryService = Depends(get_registry_reader),
) -> CollectionResponse:
    collection = service.get_collection(contract_id)
    return CollectionResponse.model_validate(collection, from_attributes=True)


@router.post(
    "/{contract_id}/minting/toggle",
    response_model=MintingToggleResponse,
)
def toggle_minting(
    contract_id: str,
    caller: str = Depends(require_caller),
    service: TokenRegistryService = Depends(get_registry_service),
) -> MintingToggleResponse:
    enabled = service.toggle_minting(contract_id, caller=caller)
    return MintingToggleResponse(contract_id=contract_id, minting_enabled=enabled)


@router.get(
    "/{contract_id}/holders/{principal}",
    response_model=HoldingsResponse,
)
def get_holdings(
    contract_id: str,
    principal: str,
    service: TokenRegistryService = Depends(get_registry_reader),
) -> HoldingsResponse:
    token_ids = service.tokens_owned_by(contract_id, principal)
    return HoldingsResponse(contract_id=contract_id, principal=principal, token_ids=token_ids, balance=len(token_ids))


@router.post(
    "/{contract_id}/tokens",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
)
def mint_token(
    contract_id: str,
    payload: MintRequest,
    caller: str = Depends(require_caller),
    service: TokenRegistryService = Depends(get_registry_service),
) -> TokenResponse:
    token = service.mint(
        contract_id,
        payload.recipient,
        payload.content_uri,
        payload.royalty_bps,
        caller=caller,
    )
    return TokenResponse.model_validate(token, from_attributes=True)


@router.get(
    "/{contract_id}/tokens/{token_id}",
    response_model=TokenResponse,
)
def get_token_metadata(
    contract_id: str,
    token_id: LedgerId,
    service: TokenRegistryService = Depends(get_registry_reader),
) -> TokenResponse:
    token = service.get_token(contract_id, token_id)
    if token is None:
        raise NoSuchToken(f"Token {token_id} was never minted in {contract_id}")
    return TokenResponse.model_validate(token, from_attributes=True)


@router.get(
    "/{contract_id}/tokens/{token_id}/owner",
    response_model=TokenOwnerResponse,
)
def get_owner(
    contract_id: str,
    token_id: LedgerId,
    service: TokenRegistryService = Depends(get_registry_reader),
) -> TokenOwnerResponse:
    return TokenOwnerResponse(token_id=token_id, owner=service.get_owner(contract_id, token_id))


@router.get(
    "/{contract_id}/tokens/{token_id}/uri",
    response_model=TokenUriResponse,
)
def get_token_uri(
    contract_id: str,
    token_id: LedgerId,
    service: TokenRegistryService = Depends(get_registry_reader),
) -> TokenUriResponse:
    return TokenUriResponse(token_id=token_id, content_uri=service.get_token_uri(contract_id, token_id))


@router.get(
    "/{contract_id}/tokens/{token_id}/royalty",
    response_model=TokenRoyaltyResponse,
)
def get_token_royalty(
    contract_id: str,
    token_id: LedgerId,
    service: TokenRegistryService = Depends(get_registry_reader),
) -> TokenRoyaltyResponse:
    return TokenRoyaltyResponse(token_id=token_id, royalty_bps=service.get_token_royalty(contract_id, token_id))


@router.post(
    "/{contract_id}/tokens/{token_id}/transfer",
    response_model=TokenResponse,
)
def transfer_token(
    contract_id: str,
    token_id: LedgerId,
    payload: TransferRequest,
    caller: str = Depends(require_caller),
    service: TokenRegistryService = Depends(get_registry_service),
) -> TokenResponse:
    token = service.transfer(contract_id, token_id, payload.sender, payload.recipient, caller=caller)
    return TokenResponse.model_validate(token, from_attributes=True)


@router.post(
    "/{contract_id}/tokens/{token_id}/approve",
    response_model=TokenResponse,
)
def approve_spender(
    contract_id: str,
    token_id: LedgerId,
    payload: ApproveRequest,
    caller: str = Depends(require_caller),
    service: TokenRegistryService = Depends(get_registry_service),
) -> TokenResponse:
    token = service.approve(contract_id, token_id, payload.spender, caller=caller)
    return TokenResponse.model_validate(token, from_attributes=True)


@router.post(
    "/{contract_id}/tokens/{token_id}/burn",
    response_model=TokenResponse,
)
def burn_token(
    contract_id: str,
    token_id: LedgerId,
    caller: str = Depends(require_caller),
    service: TokenRegistryService = Depends(get_registry_service),
) -> TokenResponse:
    token = service.burn(contract_id, token_id, caller=caller)
    return TokenResponse.model_validate(token, from_attributes=True)
