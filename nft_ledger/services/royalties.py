"""Royalty and platform fee calculation, royalty tables and creator earnings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select

from nft_ledger.models.marketplace import MarketplaceState
from nft_ledger.models.royalty import CreatorEarning, PlatformFeeConfig, RoyaltyRecord
from nft_ledger.models.token import Collection, Token
from nft_ledger.models.types import MAX_LEDGER_INT
from nft_ledger.services.base import LedgerService
from nft_ledger.services.errors import (
    InvalidFee,
    InvalidPrice,
    InvalidRoyalty,
    OwnerOnly,
    Unauthorized,
)

BASIS_POINTS = 10_000
MAX_ROYALTY_BPS = 1000
# Leaves room for the maximum royalty so the seller share never goes negative.
MAX_PLATFORM_FEE_BPS = BASIS_POINTS - MAX_ROYALTY_BPS


@dataclass(frozen=True)
class Distribution:
    """How one sale amount splits between platform, royalty recipient and seller."""

    platform_fee: int
    royalty: int
    seller_amount: int

    @property
    def total(self) -> int:
        return self.platform_fee + self.royalty + self.seller_amount


@dataclass(frozen=True)
class EffectiveRoyalty:
    """Royalty that applies to a token at settlement time.

    ``source`` is one of ``token``, ``collection``, ``mint`` or ``none``.
    """

    recipient: Optional[str]
    rate_bps: int
    source: str


@dataclass(frozen=True)
class PaymentDistribution:
    """A distribution together with the parties it pays."""

    distribution: Distribution
    seller: str
    fee_recipient: str
    royalty_recipient: Optional[str]
    royalty_bps: int


@dataclass(frozen=True)
class PlatformFeeInfo:
    fee_bps: int
    recipient: str
    enabled: bool


def calculate_royalty(amount: int, rate_bps: int) -> int:
    return amount * rate_bps // BASIS_POINTS


def split_amount(amount: int, fee_bps: int, royalty_bps: int) -> Distribution:
    """Floor the fee and royalty; the seller keeps the remainder so nothing leaks."""

    if amount < 0:
        raise InvalidPrice("Amount must not be negative")
    platform_fee = calculate_royalty(amount, fee_bps)
    royalty = calculate_royalty(amount, royalty_bps)
    return Distribution(
        platform_fee=platform_fee,
        royalty=royalty,
        seller_amount=amount - platform_fee - royalty,
    )


def _validate_royalty(rate_bps: int) -> None:
    if rate_bps < 0 or rate_bps > MAX_ROYALTY_BPS:
        raise InvalidRoyalty(f"Royalty {rate_bps} bps is outside 0..{MAX_ROYALTY_BPS}")


class RoyaltyService(LedgerService):
    """Royalty & fee calculator backed by the platform fee singleton."""

    logger_name = "nft_ledger.services.royalties"

    def fee_config(self) -> PlatformFeeConfig:
        config = self._session.get(PlatformFeeConfig, 1)
        if config is None:
            raise RuntimeError("Platform fee configuration missing; bootstrap the ledger first")
        return config

    def calculate_platform_fee(self, amount: int) -> int:
        if amount < 0:
            raise InvalidPrice("Amount must not be negative")
        return calculate_royalty(amount, self.fee_config().fee_bps)

    def calculate_distribution(self, amount: int, rate_bps: int) -> Distribution:
        _validate_royalty(rate_bps)
        config = self.fee_config()
        return split_amount(amount, config.fee_bps, rate_bps if config.royalty_enabled else 0)

    def get_platform_fee_info(self) -> PlatformFeeInfo:
        config = self.fee_config()
        return PlatformFeeInfo(fee_bps=config.fee_bps, recipient=config.recipient, enabled=config.royalty_enabled)

    def get_creator_earnings(self, principal: str) -> int:
        earning = self._session.get(CreatorEarning, principal)
        return earning.total if earning else 0

    def get_token_royalty(self, contract_id: str, token_id: int) -> Optional[RoyaltyRecord]:
        return self._find_record(contract_id, token_id)

    def get_collection_royalty(self, contract_id: str) -> Optional[RoyaltyRecord]:
        return self._find_record(contract_id, None)

    def effective_royalty(self, contract_id: str, token_id: int) -> EffectiveRoyalty:
        """Token override, then collection default, then the mint-time rate paid to the creator."""

        record = self._find_record(contract_id, token_id)
        if record is not None:
            return EffectiveRoyalty(recipient=record.recipient, rate_bps=record.rate_bps, source="token")

        record = self._find_record(contract_id, None)
        if record is not None:
            return EffectiveRoyalty(recipient=record.recipient, rate_bps=record.rate_bps, source="collection")

        token = self._session.scalar(
            select(Token)
            .join(Collection, Token.collection_id == Collection.id)
            .where(Collection.contract_id == contract_id, Token.token_id == token_id)
        )
        if token is not None and token.royalty_bps > 0:
            return EffectiveRoyalty(recipient=token.creator, rate_bps=token.royalty_bps, source="mint")

        return EffectiveRoyalty(recipient=None, rate_bps=0, source="none")

    def set_token_royalty(
        self,
        contract_id: str,
        token_id: int,
        recipient: str,
        rate_bps: int,
        *,
        caller: str,
    ) -> RoyaltyRecord:
        self._require_royalty_admin(contract_id, caller)
        _validate_royalty(rate_bps)
        record = self._upsert_record(contract_id, token_id, recipient, rate_bps)

        self._commit_record(
            action="royalty.token_set",
            actor=caller,
            subject_type="token",
            subject_id=f"{contract_id}:{token_id}",
            details={
                "token_contract": contract_id,
                "token_id": token_id,
                "recipient": recipient,
                "rate_bps": rate_bps,
            },
        )
        return record

    def set_collection_default_royalty(
        self,
        contract_id: str,
        recipient: str,
        rate_bps: int,
        *,
        caller: str,
    ) -> RoyaltyRecord:
        self._require_royalty_admin(contract_id, caller)
        _validate_royalty(rate_bps)
        record = self._upsert_record(contract_id, None, recipient, rate_bps)

        self._commit_record(
            action="royalty.collection_default_set",
            actor=caller,
            subject_type="collection",
            subject_id=contract_id,
            details={"token_contract": contract_id, "recipient": recipient, "rate_bps": rate_bps},
        )
        return record

    def distribute_payment(
        self,
        contract_id: str,
        token_id: int,
        amount: int,
        seller: str,
        buyer: str,
        *,
        caller: str,
    ) -> PaymentDistribution:
        """Split a sale using the effective royalty and credit the royalty recipient."""

        royalty = self.effective_royalty(contract_id, token_id)
        return self._distribute(
            amount,
            seller=seller,
            recipient=royalty.recipient,
            rate_bps=royalty.rate_bps,
            caller=caller,
            context={
                "token_contract": contract_id,
                "token_id": token_id,
                "buyer": buyer,
                "royalty_source": royalty.source,
            },
        )

    def distribute_payment_simple(
        self,
        amount: int,
        seller: str,
        creator: str,
        rate_bps: int,
        *,
        caller: str,
    ) -> PaymentDistribution:
        """Same split for direct sales, with the royalty recipient and rate supplied by the caller."""

        _validate_royalty(rate_bps)
        return self._distribute(
            amount,
            seller=seller,
            recipient=creator,
            rate_bps=rate_bps,
            caller=caller,
            context={"royalty_source": "direct"},
        )

    def set_platform_fee(self, fee_bps: int, *, caller: str) -> PlatformFeeInfo:
        config = self._require_owner(caller)
        if fee_bps < 0 or fee_bps > MAX_PLATFORM_FEE_BPS:
            raise InvalidFee(f"Platform fee {fee_bps} bps is outside 0..{MAX_PLATFORM_FEE_BPS}")

        previous = config.fee_bps
        config.fee_bps = fee_bps
        self._session.add(config)
        self._session.flush()

        self._commit_record(
            action="platform_fee.updated",
            actor=caller,
            subject_type="platform_fee",
            subject_id="fee_bps",
            details={"previous_fee_bps": previous, "fee_bps": fee_bps},
        )
        return self.get_platform_fee_info()

    def set_platform_fee_recipient(self, recipient: str, *, caller: str) -> PlatformFeeInfo:
        """Update the fee recipient; only called once the caller's admin role has been checked."""

        config = self.fee_config()
        previous = config.recipient
        config.recipient = recipient
        self._session.add(config)
        self._session.flush()

        self._commit_record(
            action="platform_fee.recipient_updated",
            actor=caller,
            subject_type="platform_fee",
            subject_id="recipient",
            details={"previous_recipient": previous, "recipient": recipient},
        )
        return self.get_platform_fee_info()

    def toggle_royalty_system(self, *, caller: str) -> bool:
        config = self._require_owner(caller)
        config.royalty_enabled = not config.royalty_enabled
        self._session.add(config)
        self._session.flush()

        self._commit_record(
            action="royalty.system_toggled",
            actor=caller,
            subject_type="platform_fee",
            subject_id="royalty_enabled",
            details={"enabled": config.royalty_enabled},
        )
        return config.royalty_enabled

    def _distribute(
        self,
        amount: int,
        *,
        seller: str,
        recipient: Optional[str],
        rate_bps: int,
        caller: str,
        context: dict,
    ) -> PaymentDistribution:
        self._require_settlement_caller(caller)
        if amount <= 0 or amount > MAX_LEDGER_INT:
            raise InvalidPrice("Payment amount must be a positive 64-bit amount")

        config = self.fee_config()
        if not config.royalty_enabled or recipient is None:
            recipient, rate_bps = None, 0

        distribution = split_amount(amount, config.fee_bps, rate_bps)
        if recipient is not None and distribution.royalty > 0:
            self._credit_earnings(recipient, distribution.royalty)

        self._commit_record(
            action="royalty.distributed",
            actor=caller,
            subject_type="seller",
            subject_id=seller,
            details={
                **context,
                "amount": amount,
                "platform_fee": distribution.platform_fee,
                "fee_recipient": config.recipient,
                "royalty": distribution.royalty,
                "royalty_recipient": recipient,
                "royalty_bps": rate_bps,
                "seller_amount": distribution.seller_amount,
            },
        )
        return PaymentDistribution(
            distribution=distribution,
            seller=seller,
            fee_recipient=config.recipient,
            royalty_recipient=recipient,
            royalty_bps=rate_bps,
        )

    def _credit_earnings(self, principal: str, amount: int) -> None:
        earning = self._session.get(CreatorEarning, principal)
        if earning is None:
            earning = CreatorEarning(principal=principal, total=0)
        earning.total += amount
        self._session.add(earning)
        self._session.flush()

    def _require_owner(self, caller: str) -> PlatformFeeConfig:
        config = self.fee_config()
        if caller != config.owner:
            raise OwnerOnly()
        return config

    def _require_royalty_admin(self, contract_id: str, caller: str) -> None:
        if caller == self.fee_config().owner:
            return
        collection = self._session.scalar(select(Collection).where(Collection.contract_id == contract_id))
        if collection is None or caller != collection.owner:
            raise OwnerOnly(f"Only the ledger owner or the owner of {contract_id} may set royalties")

    def _require_settlement_caller(self, caller: str) -> None:
        # Earnings are only credited by trusted settlement callers.
        state = self._session.get(MarketplaceState, 1)
        trusted = {self.fee_config().owner}
        if state is not None:
            trusted.update({state.owner, state.operator})
        if caller not in trusted:
            raise Unauthorized("Only the ledger owner or marketplace operator may distribute payments")

    def _find_record(self, contract_id: str, token_id: Optional[int]) -> Optional[RoyaltyRecord]:
        stmt = select(RoyaltyRecord).where(RoyaltyRecord.token_contract == contract_id)
        if token_id is None:
            stmt = stmt.where(RoyaltyRecord.token_id.is_(None))
        else:
            stmt = stmt.where(RoyaltyRecord.token_id == token_id)
        return self._session.scalar(stmt)

    def _upsert_record(
        self,
        contract_id: str,
        token_id: Optional[int],
        recipient: str,
        rate_bps: int,
    ) -> RoyaltyRecord:
        record = self._find_record(contract_id, token_id)
        if record is None:
            record = RoyaltyRecord(token_contract=contract_id, token_id=token_id)
        record.recipient = recipient
        record.rate_bps = rate_bps
        self._session.add(record)
        self._session.flush()
        return record
