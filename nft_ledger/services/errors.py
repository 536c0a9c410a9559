"""Ledger exception hierarchy.

Every failure raised by the registry, marketplace and royalty services derives
from :class:`LedgerError` and carries a stable ``code`` that API clients and
indexers can match on. The category base classes decide the HTTP status in
``nft_ledger.api.error_handlers``.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    code = "LEDGER_ERROR"
    default_message = "Ledger operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class LedgerNotFoundError(LedgerError):
    """Referenced record does not exist."""


class LedgerAuthorizationError(LedgerError):
    """Caller lacks the role or ownership the operation requires."""


class LedgerValidationError(LedgerError):
    """Input is outside the accepted range."""


class LedgerStateError(LedgerError):
    """Record exists but is not in an actionable state."""


class NoSuchToken(LedgerNotFoundError):
    code = "NO_SUCH_TOKEN"
    default_message = "Token does not exist or has been burned"


class NoSuchListing(LedgerNotFoundError):
    code = "NO_SUCH_LISTING"
    default_message = "Listing not found"


class NoSuchOffer(LedgerNotFoundError):
    code = "NO_SUCH_OFFER"
    default_message = "Offer not found"


class NoSuchCollection(LedgerNotFoundError):
    code = "NO_SUCH_COLLECTION"
    default_message = "Collection not found"


class Unauthorized(LedgerAuthorizationError):
    code = "UNAUTHORIZED"
    default_message = "Caller is not authorized for this operation"


class NotTokenOwner(LedgerAuthorizationError):
    code = "NOT_TOKEN_OWNER"
    default_message = "Caller does not own this token"


class OwnerOnly(LedgerAuthorizationError):
    code = "OWNER_ONLY"
    default_message = "Only the administrative owner may perform this operation"


class MarketplaceNotApproved(LedgerAuthorizationError):
    code = "MARKETPLACE_NOT_APPROVED"
    default_message = "Marketplace is not an approved spender for this token"


class InvalidPrice(LedgerValidationError):
    code = "INVALID_PRICE"
    default_message = "Price must be greater than zero and fit in 64 bits"


class InvalidOffer(LedgerValidationError):
    code = "INVALID_OFFER"
    default_message = "Offer amount must be greater than zero and fit in 64 bits"


class InvalidRoyalty(LedgerValidationError):
    code = "INVALID_ROYALTY"
    default_message = "Royalty exceeds 1000 basis points"


class InvalidFee(LedgerValidationError):
    code = "INVALID_FEE"
    default_message = "Platform fee is out of range"


class InvalidUri(LedgerValidationError):
    code = "INVALID_URI"
    default_message = "Content URI must not be empty"


class BlockHeightRegression(LedgerValidationError):
    code = "BLOCK_HEIGHT_REGRESSION"
    default_message = "Block height can only move forward"


class MintingDisabled(LedgerStateError):
    code = "MINTING_DISABLED"
    default_message = "Minting is disabled for this collection"


class MarketplaceDisabled(LedgerStateError):
    code = "MARKETPLACE_DISABLED"
    default_message = "Marketplace is disabled"


class AlreadyClosed(LedgerStateError):
    code = "ALREADY_CLOSED"
    default_message = "Record is already closed"


class Expired(LedgerStateError):
    code = "EXPIRED"
    default_message = "Expiry block has passed"


class StaleListing(LedgerStateError):
    code = "STALE_LISTING"
    default_message = "Seller no longer owns the listed token"


class CollectionExists(LedgerStateError):
    code = "COLLECTION_EXISTS"
    default_message = "Collection is already registered"
