"""Marketplace ledger: listings, offers and settlement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from nft_ledger.models.marketplace import (
    Listing,
    ListingCloseReason,
    MarketplaceState,
    Offer,
    OfferCloseReason,
    Sale,
)
from nft_ledger.models.token import Token
from nft_ledger.models.types import MAX_LEDGER_INT
from nft_ledger.services.base import LedgerService
from nft_ledger.services.errors import (
    AlreadyClosed,
    Expired,
    InvalidOffer,
    InvalidPrice,
    MarketplaceDisabled,
    MarketplaceNotApproved,
    NoSuchListing,
    NoSuchOffer,
    NoSuchToken,
    NotTokenOwner,
    OwnerOnly,
    StaleListing,
    Unauthorized,
)
from nft_ledger.services.registry import TokenRegistryService
from nft_ledger.services.royalties import PlatformFeeInfo, RoyaltyService


@dataclass(frozen=True)
class Settlement:
    """Outcome of a purchase or an accepted offer."""

    sale: Sale
    token_contract: str
    token_id: int
    seller: str
    buyer: str
    price: int
    platform_fee: int
    royalty: int
    seller_amount: int
    royalty_recipient: Optional[str]


class MarketplaceService(LedgerService):
    """Listing/offer engine. Settlement drives the registry and royalty services in one transaction."""

    logger_name = "nft_ledger.services.marketplace"

    def __init__(
        self,
        session: Session,
        registry: Optional[TokenRegistryService] = None,
        royalties: Optional[RoyaltyService] = None,
        **kwargs,
    ) -> None:
        super().__init__(session, **kwargs)
        self._registry = registry or TokenRegistryService(session, journal=self._journal, event_dispatcher=self._events)
        self._royalties = royalties or RoyaltyService(session, journal=self._journal, event_dispatcher=self._events)

    def state(self) -> MarketplaceState:
        state = self._session.get(MarketplaceState, 1)
        if state is None:
            raise RuntimeError("Marketplace state missing; bootstrap the ledger first")
        return state

    # Listings

    def list_token(self, contract_id: str, token_id: int, price: int, expiry: int, *, caller: str) -> Listing:
        state = self.state()
        token = self._registry.get_token(contract_id, token_id)
        if token is None or token.owner != caller:
            raise NotTokenOwner(f"{caller} does not own token {token_id}")
        if price <= 0 or price > MAX_LEDGER_INT:
            raise InvalidPrice()
        if not state.enabled:
            raise MarketplaceDisabled()

        listing = Listing(
            token_contract=contract_id,
            token_id=token_id,
            seller=caller,
            price=price,
            expiry=expiry,
            active=True,
            created_at_block=state.block_height,
        )
        self._session.add(listing)
        self._session.flush()

        self._commit_record(
            action="listing.created",
            actor=caller,
            subject_type="listing",
            subject_id=str(listing.listing_id),
            details={
                "listing_id": listing.listing_id,
                "token_contract": contract_id,
                "token_id": token_id,
                "price": price,
                "expiry": expiry,
            },
        )
        return listing

    def unlist(self, listing_id: int, *, caller: str) -> Listing:
        listing = self.require_listing(listing_id)
        if caller != listing.seller:
            raise Unauthorized(f"Only the seller may unlist listing {listing_id}")
        if not listing.active:
            raise AlreadyClosed(f"Listing {listing_id} is already closed")

        listing.active = False
        listing.closed_reason = ListingCloseReason.UNLISTED
        self._session.add(listing)
        self._session.flush()

        self._commit_record(
            action="listing.unlisted",
            actor=caller,
            subject_type="listing",
            subject_id=str(listing_id),
            details={
                "listing_id": listing_id,
                "token_contract": listing.token_contract,
                "token_id": listing.token_id,
            },
        )
        return listing

    def buy(self, listing_id: int, *, caller: str) -> Settlement:
        listing = self.require_listing(listing_id)
        state = self.state()
        if not state.enabled:
            raise MarketplaceDisabled()
        if not listing.active:
            raise AlreadyClosed(f"Listing {listing_id} is already closed")
        if state.block_height > listing.expiry:
            raise Expired(f"Listing {listing_id} expired at block {listing.expiry}")

        token = self._registry.get_token(listing.token_contract, listing.token_id)
        if token is None or token.owner != listing.seller:
            raise StaleListing(f"Seller of listing {listing_id} no longer owns the token")
        if token.approved_spender != state.operator:
            raise MarketplaceNotApproved()

        settlement = self._settle(
            token,
            seller=listing.seller,
            buyer=caller,
            price=listing.price,
            operator=state.operator,
            mover=state.operator,
            listing_id=listing_id,
        )

        listing.active = False
        listing.closed_reason = ListingCloseReason.BOUGHT
        listing.buyer = caller
        self._session.add(listing)
        self._session.flush()

        self._commit_record(
            action="listing.purchased",
            actor=caller,
            subject_type="listing",
            subject_id=str(listing_id),
            details={
                "listing_id": listing_id,
                "token_contract": listing.token_contract,
                "token_id": listing.token_id,
                "seller": listing.seller,
                "price": listing.price,
                "sale_id": settlement.sale.sale_id,
            },
        )
        return settlement

    # Offers

    def make_offer(self, contract_id: str, token_id: int, amount: int, expiry: int, *, caller: str) -> Offer:
        state = self.state()
        if not state.enabled:
            raise MarketplaceDisabled()
        if amount <= 0 or amount > MAX_LEDGER_INT:
            raise InvalidOffer()
        token = self._registry.get_token(contract_id, token_id)
        if token is None or token.owner is None:
            raise NoSuchToken(f"Token {token_id} does not exist in {contract_id}")

        offer = Offer(
            token_contract=contract_id,
            token_id=token_id,
            buyer=caller,
            amount=amount,
            expiry=expiry,
            active=True,
            created_at_block=state.block_height,
        )
        self._session.add(offer)
        self._session.flush()

        self._commit_record(
            action="offer.created",
            actor=caller,
            subject_type="offer",
            subject_id=str(offer.offer_id),
            details={
                "offer_id": offer.offer_id,
                "token_contract": contract_id,
                "token_id": token_id,
                "amount": amount,
                "expiry": expiry,
            },
        )
        return offer

    def cancel_offer(self, offer_id: int, *, caller: str) -> Offer:
        offer = self.require_offer(offer_id)
        if caller != offer.buyer:
            raise Unauthorized(f"Only the buyer may cancel offer {offer_id}")
        if not offer.active:
            raise AlreadyClosed(f"Offer {offer_id} is already closed")

        self._close_offer(offer, OfferCloseReason.CANCELLED, caller)
        return offer

    def reject_offer(self, offer_id: int, *, caller: str) -> Offer:
        offer = self.require_offer(offer_id)
        token = self._registry.get_token(offer.token_contract, offer.token_id)
        if token is None or token.owner != caller:
            raise Unauthorized(f"Only the current token owner may reject offer {offer_id}")
        if not offer.active:
            raise AlreadyClosed(f"Offer {offer_id} is already closed")

        self._close_offer(offer, OfferCloseReason.REJECTED, caller)
        return offer

    def accept_offer(self, offer_id: int, *, caller: str) -> Settlement:
        offer = self.require_offer(offer_id)
        state = self.state()
        if not state.enabled:
            raise MarketplaceDisabled()
        if not offer.active:
            raise AlreadyClosed(f"Offer {offer_id} is already closed")
        if state.block_height > offer.expiry:
            raise Expired(f"Offer {offer_id} expired at block {offer.expiry}")

        token = self._registry.get_token(offer.token_contract, offer.token_id)
        if token is None or token.owner is None:
            raise NoSuchToken(f"Token {offer.token_id} does not exist in {offer.token_contract}")
        if token.owner != caller:
            raise Unauthorized(f"Only the current token owner may accept offer {offer_id}")

        settlement = self._settle(
            token,
            seller=caller,
            buyer=offer.buyer,
            price=offer.amount,
            operator=state.operator,
            mover=caller,
            offer_id=offer_id,
        )
        self._close_offer(offer, OfferCloseReason.ACCEPTED, caller, sale_id=settlement.sale.sale_id)
        return settlement

    # Administration

    def calculate_platform_fee(self, amount: int) -> int:
        return self._royalties.calculate_platform_fee(amount)

    def toggle_marketplace(self, *, caller: str) -> bool:
        state = self._require_owner(caller)
        state.enabled = not state.enabled
        self._session.add(state)
        self._session.flush()

        self._commit_record(
            action="marketplace.toggled",
            actor=caller,
            subject_type="marketplace",
            subject_id="enabled",
            details={"enabled": state.enabled},
        )
        return state.enabled

    def set_platform_fee_recipient(self, recipient: str, *, caller: str) -> PlatformFeeInfo:
        self._require_owner(caller)
        return self._royalties.set_platform_fee_recipient(recipient, caller=caller)

    # Reads

    def get_listing(self, listing_id: int) -> Optional[Listing]:
        return self._session.get(Listing, listing_id)

    def require_listing(self, listing_id: int) -> Listing:
        listing = self.get_listing(listing_id)
        if listing is None:
            raise NoSuchListing(f"Listing {listing_id} not found")
        return listing

    def get_offer(self, offer_id: int) -> Optional[Offer]:
        return self._session.get(Offer, offer_id)

    def require_offer(self, offer_id: int) -> Offer:
        offer = self.get_offer(offer_id)
        if offer is None:
            raise NoSuchOffer(f"Offer {offer_id} not found")
        return offer

    def get_token_offers(self, contract_id: str, token_id: int) -> List[int]:
        stmt = (
            select(Offer.offer_id)
            .where(Offer.token_contract == contract_id, Offer.token_id == token_id)
            .order_by(Offer.offer_id)
        )
        return list(self._session.scalars(stmt))

    def active_listings(self, contract_id: Optional[str] = None) -> List[Listing]:
        stmt = select(Listing).where(Listing.active.is_(True))
        if contract_id is not None:
            stmt = stmt.where(Listing.token_contract == contract_id)
        return list(self._session.scalars(stmt.order_by(Listing.listing_id)))

    def token_history(self, contract_id: str, token_id: int) -> List[Sale]:
        stmt = (
            select(Sale)
            .where(Sale.token_contract == contract_id, Sale.token_id == token_id)
            .order_by(Sale.sale_id)
        )
        return list(self._session.scalars(stmt))

    def _settle(
        self,
        token: Token,
        *,
        seller: str,
        buyer: str,
        price: int,
        operator: str,
        mover: str,
        listing_id: Optional[int] = None,
        offer_id: Optional[int] = None,
    ) -> Settlement:
        contract_id = token.contract_id
        payment = self._royalties.distribute_payment(
            contract_id,
            token.token_id,
            price,
            seller,
            buyer,
            caller=operator,
        )
        self._registry.move_token(token, buyer, actor=mover, reason="sale")

        distribution = payment.distribution
        sale = Sale(
            listing_id=listing_id,
            offer_id=offer_id,
            token_contract=contract_id,
            token_id=token.token_id,
            seller=seller,
            buyer=buyer,
            price=price,
            platform_fee=distribution.platform_fee,
            fee_recipient=payment.fee_recipient,
            royalty=distribution.royalty,
            royalty_recipient=payment.royalty_recipient,
            seller_amount=distribution.seller_amount,
            block_height=self._block_height(),
        )
        self._session.add(sale)
        self._session.flush()

        return Settlement(
            sale=sale,
            token_contract=contract_id,
            token_id=token.token_id,
            seller=seller,
            buyer=buyer,
            price=price,
            platform_fee=distribution.platform_fee,
            royalty=distribution.royalty,
            seller_amount=distribution.seller_amount,
            royalty_recipient=payment.royalty_recipient,
        )

    def _close_offer(
        self,
        offer: Offer,
        reason: OfferCloseReason,
        caller: str,
        *,
        sale_id: Optional[int] = None,
    ) -> None:
        offer.active = False
        offer.closed_reason = reason
        self._session.add(offer)
        self._session.flush()

        details = {
            "offer_id": offer.offer_id,
            "token_contract": offer.token_contract,
            "token_id": offer.token_id,
            "buyer": offer.buyer,
            "amount": offer.amount,
        }
        if sale_id is not None:
            details["sale_id"] = sale_id

        self._commit_record(
            action=f"offer.{reason.value}",
            actor=caller,
            subject_type="offer",
            subject_id=str(offer.offer_id),
            details=details,
        )

    def _require_owner(self, caller: str) -> MarketplaceState:
        state = self.state()
        if caller != state.owner:
            raise OwnerOnly()
        return state
