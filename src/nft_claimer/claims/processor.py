"""Claim processor - authorizes, records and pays out claims."""

from __future__ import annotations

import logging

from nft_claimer.claims.custody import TokenCustody
from nft_claimer.claims.delegation import DelegationResolver
from nft_claimer.claims.registry import ClaimRegistry, validate_token_ids
from nft_claimer.errors import (
    AlreadyClaimedOrNotRegistered,
    ClaimerError,
    NotAuthorized,
    TransferOutcomeUnknown,
)
from nft_claimer.interfaces.ownership import OwnershipSource
from nft_claimer.interfaces.store import ClaimStore
from nft_claimer.models.claims import ClaimEntry, ClaimReceipt

log = logging.getLogger(__name__)


class ClaimProcessor:
    """Runs claim() for a batch of tokens as one all-or-nothing unit.

    Each call:
    1. Checks every token has a claimable entry (no repeats in the batch)
    2. Looks up each token's controller
    3. Requires the caller to be that controller or its delegate
    4. Sums the amounts owed
    5. Marks all entries claimed inside a store transaction
    6. Pays the total to the caller; a failed payout rolls step 5 back

    A payout that was sent but not confirmed commits step 5 and raises
    TransferOutcomeUnknown, so the tokens can never be paid a second time.
    """

    def __init__(
        self,
        store: ClaimStore,
        registry: ClaimRegistry,
        ownership: OwnershipSource,
        resolver: DelegationResolver,
        custody: TokenCustody,
    ) -> None:
        self._store = store
        self._registry = registry
        self._ownership = ownership
        self._resolver = resolver
        self._custody = custody

    async def claim(
        self, caller: str, collection: str, token_ids: list[int],
    ) -> ClaimReceipt:
        log.info(
            "Claim: caller=%s collection=%s tokens=%s",
            caller[:16], collection[:16], token_ids,
        )
        try:
            entries = await self._check_entries(collection, token_ids)
            for token_id in token_ids:
                await self._check_authorized(caller, collection, token_id)
            total = sum(e.amount_owed for e in entries)
            receipt = await self._settle(caller, collection, token_ids, total)
        except TransferOutcomeUnknown as exc:
            log.error(
                "Claim by %s left unconfirmed (tx=%s): %s",
                caller[:16], exc.tx_hash or "?", exc,
            )
            raise
        except ClaimerError as exc:
            log.warning("Claim by %s failed: %s", caller[:16], exc)
            await self._store.log_activity(
                "claim_failed", f"{exc.code}: {exc}",
                collection=collection,
                token_ids=list(token_ids) if token_ids else None,
                actor=caller,
            )
            raise

        log.info(
            "Claimed %d tokens on %s for %s: %d paid",
            len(token_ids), collection[:16], caller[:16], total,
        )
        return receipt

    async def _check_entries(
        self, collection: str, token_ids: list[int],
    ) -> list[ClaimEntry]:
        validate_token_ids(token_ids)
        found = await self._registry.lookup_many(collection, list(dict.fromkeys(token_ids)))
        seen: set[int] = set()
        entries: list[ClaimEntry] = []
        for token_id in token_ids:
            entry = found.get(token_id)
            if token_id in seen or entry is None or not entry.claimable:
                raise AlreadyClaimedOrNotRegistered(collection, token_id)
            seen.add(token_id)
            entries.append(entry)
        return entries

    async def _check_authorized(
        self, caller: str, collection: str, token_id: int,
    ) -> None:
        try:
            controller = await self._ownership.controller_of(collection, token_id)
        except Exception as exc:
            log.warning(
                "Owner lookup for token %d of %s failed: %s",
                token_id, collection[:16], exc,
            )
            raise NotAuthorized(caller, collection, token_id) from exc

        if not await self._resolver.is_authorized(caller, controller, collection, token_id):
            raise NotAuthorized(caller, collection, token_id)

    async def _settle(
        self, caller: str, collection: str, token_ids: list[int], total: int,
    ) -> ClaimReceipt:
        async with self._store.transaction():
            # Effects before the external transfer
            changed = await self._registry.mark_claimed(collection, token_ids, caller)
            if len(changed) != len(token_ids):
                stale = next(t for t in token_ids if t not in changed)
                raise AlreadyClaimedOrNotRegistered(collection, stale)

            unconfirmed: TransferOutcomeUnknown | None = None
            try:
                transfer = await self._custody.payout(caller, total)
                tx_hash = transfer.tx_hash
            except TransferOutcomeUnknown as exc:
                unconfirmed = exc
                tx_hash = exc.tx_hash

            receipt = ClaimReceipt(
                collection=collection,
                token_ids=list(token_ids),
                claimant=caller,
                amount=total,
                tx_hash=tx_hash,
            )
            await self._store.save_receipt(receipt)
            if unconfirmed is None:
                await self._store.log_activity(
                    "claimed",
                    f"Claimed {len(token_ids)} tokens, paid {total}",
                    collection=collection,
                    token_ids=list(token_ids),
                    amount=total,
                    actor=caller,
                )
            else:
                await self._store.log_activity(
                    "claim_unconfirmed",
                    f"Payout of {total} sent as {tx_hash or '?'} but not confirmed",
                    collection=collection,
                    token_ids=list(token_ids),
                    amount=total,
                    actor=caller,
                )

        # Entries stay claimed; the caller must check the transaction
        if unconfirmed is not None:
            raise unconfirmed
        return receipt
