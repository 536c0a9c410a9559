"""Block height endpoints used for listing and offer expiry."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from nft_ledger.api.dependencies import get_chain_reader, get_chain_service, require_caller
from nft_ledger.schemas.chain import BlockAdvanceRequest, ChainStateResponse
from nft_ledger.services.chain import ChainService

router = APIRouter()


@router.get(
    "",
    response_model=ChainStateResponse,
)
def get_chain_state(
    service: ChainService = Depends(get_chain_reader),
) -> ChainStateResponse:
    return ChainStateResponse(block_height=service.current_height())


@router.post(
    "/blocks",
    response_model=ChainStateResponse,
)
def report_blocks(
    payload: BlockAdvanceRequest,
    caller: str = Depends(require_caller),
    service: ChainService = Depends(get_chain_service),
) -> ChainStateResponse:
    if payload.height is not None:
        height = service.sync_to(payload.height, caller=caller)
    else:
        height = service.advance(payload.blocks, caller=caller)
    return ChainStateResponse(block_height=height)
