"""Block height API schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from nft_ledger.models.types import MAX_LEDGER_INT


class ChainStateResponse(BaseModel):
    block_height: int


class BlockAdvanceRequest(BaseModel):
    """Either advance by ``blocks`` or sync to an absolute ``height``."""

    blocks: Optional[int] = Field(default=None, le=MAX_LEDGER_INT)
    height: Optional[int] = Field(default=None, ge=0, le=MAX_LEDGER_INT)

    @model_validator(mode="after")
    def _one_of(self) -> "BlockAdvanceRequest":
        if self.blocks is not None and self.height is not None:
            raise ValueError("Provide either blocks or height, not both")
        if self.blocks is None and self.height is None:
            self.blocks = 1
        return self
