"""SQLAlchemy ORM models for the NFT ledger."""

from nft_ledger.models.base import Base  # noqa: F401
from nft_ledger.models.journal import JournalEntry  # noqa: F401
from nft_ledger.models.marketplace import Listing, MarketplaceState, Offer, Sale  # noqa: F401
from nft_ledger.models.platform_event import PlatformEvent  # noqa: F401
from nft_ledger.models.royalty import CreatorEarning, PlatformFeeConfig, RoyaltyRecord  # noqa: F401
from nft_ledger.models.token import Collection, Token  # noqa: F401
