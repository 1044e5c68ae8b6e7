"""Claim registry - the ledger of amounts owed per NFT."""

from __future__ import annotations

import logging

from nft_claimer.claims.ownership import OwnershipGate
from nft_claimer.errors import AlreadyClaimed, ArgumentMismatch, ClaimerError
from nft_claimer.interfaces.store import ClaimStore
from nft_claimer.models.claims import ClaimEntry, RegistrationResult

log = logging.getLogger(__name__)


def validate_token_ids(token_ids: list[int]) -> None:
    if not token_ids:
        raise ArgumentMismatch("token_ids must not be empty")
    for token_id in token_ids:
        if isinstance(token_id, bool) or not isinstance(token_id, int):
            raise ArgumentMismatch(f"token id {token_id!r} is not an integer")
        if token_id < 0:
            raise ArgumentMismatch(f"token id {token_id} is negative")


class ClaimRegistry:
    """Per-(collection, token) ledger of claimable amounts.

    Entries move Unregistered -> Registered -> Claimed and never back.
    Only the owner may register; a claimed entry can't be registered again.
    """

    def __init__(self, store: ClaimStore, gate: OwnershipGate) -> None:
        self._store = store
        self._gate = gate

    async def register(
        self,
        caller: str,
        collection: str,
        token_ids: list[int],
        amount_per_token: int,
    ) -> RegistrationResult:
        """Create or overwrite unclaimed entries for every token id."""
        unique_ids: list[int] | None = None
        try:
            self._gate.require_owner(caller)
            validate_token_ids(token_ids)
            if isinstance(amount_per_token, bool) or not isinstance(amount_per_token, int):
                raise ArgumentMismatch(f"amount {amount_per_token!r} is not an integer")
            if amount_per_token < 0:
                raise ArgumentMismatch(f"amount {amount_per_token} is negative")

            unique_ids = list(dict.fromkeys(token_ids))
            async with self._store.transaction():
                existing = await self._store.get_entries(collection, unique_ids)
                claimed = [t for t in unique_ids if t in existing and existing[t].claimed]
                if claimed:
                    raise AlreadyClaimed(collection, claimed)

                await self._store.upsert_entries(collection, unique_ids, amount_per_token)
                await self._store.log_activity(
                    "claims_added",
                    f"Registered {len(unique_ids)} tokens at {amount_per_token} each",
                    collection=collection,
                    token_ids=unique_ids,
                    amount=amount_per_token * len(unique_ids),
                    actor=caller,
                )
        except ClaimerError as exc:
            log.warning("Registration on %s rejected: %s", collection[:16], exc)
            await self._store.log_activity(
                "register_failed", f"{exc.code}: {exc}",
                collection=collection, token_ids=unique_ids, actor=caller,
            )
            raise

        log.info(
            "Registered %d tokens on %s at %d each",
            len(unique_ids), collection[:16], amount_per_token,
        )
        return RegistrationResult(
            collection=collection,
            token_ids=unique_ids,
            amount_per_token=amount_per_token,
        )

    async def lookup(self, collection: str, token_id: int) -> ClaimEntry | None:
        return await self._store.get_entry(collection, token_id)

    async def lookup_many(
        self, collection: str, token_ids: list[int],
    ) -> dict[int, ClaimEntry]:
        return await self._store.get_entries(collection, token_ids)

    async def entries(
        self, collection: str | None = None, claimed: bool | None = None,
    ) -> list[ClaimEntry]:
        return await self._store.list_entries(collection, claimed)

    async def claimable_total(self, collection: str, token_ids: list[int]) -> int:
        """Sum owed over the claimable subset of `token_ids`."""
        found = await self._store.get_entries(collection, list(dict.fromkeys(token_ids)))
        return sum(e.amount_owed for e in found.values() if e.claimable)

    async def mark_claimed(
        self, collection: str, token_ids: list[int], claimant: str,
    ) -> list[int]:
        """Flip entries to claimed. Only ClaimProcessor calls this, inside its transaction."""
        return await self._store.mark_claimed(collection, token_ids, claimant)
