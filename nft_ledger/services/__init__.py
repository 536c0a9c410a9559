"""Ledger service layer."""

from nft_ledger.services.chain import ChainService  # noqa: F401
from nft_ledger.services.marketplace import MarketplaceService  # noqa: F401
from nft_ledger.services.registry import TokenRegistryService  # noqa: F401
from nft_ledger.services.royalties import RoyaltyService  # noqa: F401
