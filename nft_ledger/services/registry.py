"""Token registry: minting, ownership, approvals and burns per collection."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from nft_ledger.models.token import Collection, Token
from nft_ledger.services.base import LedgerService
from nft_ledger.services.errors import (
    CollectionExists,
    InvalidRoyalty,
    InvalidUri,
    MintingDisabled,
    NoSuchCollection,
    NoSuchToken,
    NotTokenOwner,
    OwnerOnly,
)
from nft_ledger.services.royalties import MAX_ROYALTY_BPS


class TokenRegistryService(LedgerService):
    """Owns the set of minted tokens, their owners, approvals and mint-time royalty."""

    logger_name = "nft_ledger.services.registry"

    def register_collection(self, contract_id: str, *, caller: str) -> Collection:
        """Deploy a new registry; the deploying caller becomes its owner."""

        existing = self._find_collection(contract_id)
        if existing is not None:
            raise CollectionExists(f"Collection {contract_id} is already registered")

        collection = Collection(contract_id=contract_id, owner=caller, minting_enabled=True, last_token_id=0)
        self._session.add(collection)
        self._session.flush()

        self._commit_record(
            action="collection.registered",
            actor=caller,
            subject_type="collection",
            subject_id=contract_id,
            details={"owner": caller},
        )
        return collection

    def get_collection(self, contract_id: str) -> Collection:
        collection = self._find_collection(contract_id)
        if collection is None:
            raise NoSuchCollection(f"Collection {contract_id} not found")
        return collection

    def list_collections(self) -> List[Collection]:
        return list(self._session.scalars(select(Collection).order_by(Collection.contract_id)))

    def mint(
        self,
        contract_id: str,
        recipient: str,
        content_uri: str,
        royalty_bps: int,
        *,
        caller: str,
    ) -> Token:
        collection = self.get_collection(contract_id)
        if not collection.minting_enabled:
            raise MintingDisabled(f"Minting is disabled for {contract_id}")
        if royalty_bps < 0 or royalty_bps > MAX_ROYALTY_BPS:
            raise InvalidRoyalty(f"Royalty {royalty_bps} bps is outside 0..{MAX_ROYALTY_BPS}")
        if not content_uri or not content_uri.strip():
            raise InvalidUri()

        token_id = collection.last_token_id + 1
        token = Token(
            collection=collection,
            token_id=token_id,
            owner=recipient,
            creator=recipient,
            content_uri=content_uri,
            royalty_bps=royalty_bps,
            approved_spender=None,
            burned=False,
        )
        collection.last_token_id = token_id
        self._session.add(token)
        self._session.flush()

        self._commit_record(
            action="token.minted",
            actor=caller,
            subject_type="token",
            subject_id=_token_ref(contract_id, token_id),
            details={
                "token_contract": contract_id,
                "token_id": token_id,
                "recipient": recipient,
                "content_uri": content_uri,
                "royalty_bps": royalty_bps,
            },
        )
        return token

    def transfer(self, contract_id: str, token_id: int, sender: str, recipient: str, *, caller: str) -> Token:
        """Move a token as its owner, or as the owner's approved spender."""

        token = self.require_live_token(contract_id, token_id)
        if token.owner != sender:
            raise NotTokenOwner(f"{sender} does not own token {token_id}")
        if caller != sender and caller != token.approved_spender:
            raise NotTokenOwner(f"{caller} may not transfer token {token_id} on behalf of {sender}")

        self.move_token(token, recipient, actor=caller, reason="transfer")
        return token

    def approve(self, contract_id: str, token_id: int, spender: str, *, caller: str) -> Token:
        token = self.require_live_token(contract_id, token_id)
        if token.owner != caller:
            raise NotTokenOwner(f"{caller} does not own token {token_id}")

        token.approved_spender = spender
        self._session.add(token)
        self._session.flush()

        self._commit_record(
            action="token.approved",
            actor=caller,
            subject_type="token",
            subject_id=_token_ref(contract_id, token_id),
            details={"token_contract": contract_id, "token_id": token_id, "spender": spender},
        )
        return token

    def burn(self, contract_id: str, token_id: int, *, caller: str) -> Token:
        token = self.require_live_token(contract_id, token_id)
        if token.owner != caller:
            raise NotTokenOwner(f"{caller} does not own token {token_id}")

        token.owner = None
        token.approved_spender = None
        token.burned = True
        self._session.add(token)
        self._session.flush()

        self._commit_record(
            action="token.burned",
            actor=caller,
            subject_type="token",
            subject_id=_token_ref(contract_id, token_id),
            details={"token_contract": contract_id, "token_id": token_id},
        )
        return token

    def toggle_minting(self, contract_id: str, *, caller: str) -> bool:
        collection = self.get_collection(contract_id)
        if caller != collection.owner:
            raise OwnerOnly(f"Only the owner of {contract_id} may toggle minting")

        collection.minting_enabled = not collection.minting_enabled
        self._session.add(collection)
        self._session.flush()

        self._commit_record(
            action="collection.minting_toggled",
            actor=caller,
            subject_type="collection",
            subject_id=contract_id,
            details={"minting_enabled": collection.minting_enabled},
        )
        return collection.minting_enabled

    def move_token(self, token: Token, recipient: str, *, actor: str, reason: str) -> None:
        """Reassign ownership and clear the approval. Callers have already authorized the move."""

        previous_owner = token.owner
        token.owner = recipient
        token.approved_spender = None
        self._session.add(token)
        self._session.flush()

        self._commit_record(
            action="token.transferred",
            actor=actor,
            subject_type="token",
            subject_id=_token_ref(token.contract_id, token.token_id),
            details={
                "token_contract": token.contract_id,
                "token_id": token.token_id,
                "from": previous_owner,
                "to": recipient,
                "reason": reason,
            },
        )

    # Reads never fail for unminted ids; they return None instead.

    def get_token(self, contract_id: str, token_id: int) -> Optional[Token]:
        collection = self.get_collection(contract_id)
        return self._session.scalar(
            select(Token).where(Token.collection_id == collection.id, Token.token_id == token_id)
        )

    def require_live_token(self, contract_id: str, token_id: int) -> Token:
        token = self.get_token(contract_id, token_id)
        if token is None or token.owner is None:
            raise NoSuchToken(f"Token {token_id} does not exist in {contract_id}")
        return token

    def get_owner(self, contract_id: str, token_id: int) -> Optional[str]:
        token = self.get_token(contract_id, token_id)
        return token.owner if token else None

    def get_token_uri(self, contract_id: str, token_id: int) -> Optional[str]:
        token = self.get_token(contract_id, token_id)
        return token.content_uri if token else None

    def get_token_royalty(self, contract_id: str, token_id: int) -> Optional[int]:
        token = self.get_token(contract_id, token_id)
        return token.royalty_bps if token else None

    def get_approved(self, contract_id: str, token_id: int) -> Optional[str]:
        token = self.get_token(contract_id, token_id)
        return token.approved_spender if token else None

    def get_last_token_id(self, contract_id: str) -> int:
        return self.get_collection(contract_id).last_token_id

    def tokens_owned_by(self, contract_id: str, principal: str) -> List[int]:
        collection = self.get_collection(contract_id)
        stmt = (
            select(Token.token_id)
            .where(Token.collection_id == collection.id, Token.owner == principal)
            .order_by(Token.token_id)
        )
        return list(self._session.scalars(stmt))

    def _find_collection(self, contract_id: str) -> Optional[Collection]:
        return self._session.scalar(select(Collection).where(Collection.contract_id == contract_id))


def _token_ref(contract_id: str, token_id: int) -> str:
    return f"{contract_id}:{token_id}"
