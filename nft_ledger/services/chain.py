"""Block/sequence counter used for listing and offer expiry."""

from __future__ import annotations

from nft_ledger.models.marketplace import MarketplaceState
from nft_ledger.services.base import LedgerService
from nft_ledger.services.errors import BlockHeightRegression, OwnerOnly


class ChainService(LedgerService):
    """Tracks the monotonic block height reported by the chain collaborator."""

    logger_name = "nft_ledger.services.chain"

    def current_height(self) -> int:
        return self._block_height()

    def advance(self, blocks: int = 1, *, caller: str) -> int:
        if blocks < 1:
            raise BlockHeightRegression("Block count must be at least 1")
        state = self._require_owner(caller)
        return self._move_to(state, state.block_height + blocks, caller)

    def sync_to(self, height: int, *, caller: str) -> int:
        state = self._require_owner(caller)
        if height < state.block_height:
            raise BlockHeightRegression(
                f"Block height {height} is below the current height {state.block_height}"
            )
        return self._move_to(state, height, caller)

    def _require_owner(self, caller: str) -> MarketplaceState:
        state = self._session.get(MarketplaceState, 1)
        if state is None or caller != state.owner:
            raise OwnerOnly("Only the ledger owner may report block height")
        return state

    def _move_to(self, state: MarketplaceState, height: int, caller: str) -> int:
        previous = state.block_height
        state.block_height = height
        self._session.add(state)
        self._session.flush()
        self._commit_record(
            action="chain.height_updated",
            actor=caller,
            subject_type="chain",
            subject_id="block_height",
            details={"previous_height": previous, "height": height},
            block_height=height,
        )
        return height
