"""NFTClaimer - wires the claim core around one store and one guard."""

from __future__ import annotations

import logging

from stellar_sdk import Keypair

from nft_claimer.claims.custody import TokenCustody
from nft_claimer.claims.delegation import DelegationResolver
from nft_claimer.claims.guard import SerialGuard
from nft_claimer.claims.ownership import OwnershipGate
from nft_claimer.claims.processor import ClaimProcessor
from nft_claimer.claims.registry import ClaimRegistry
from nft_claimer.errors import ConfigurationError
from nft_claimer.interfaces.delegation import DelegationSource
from nft_claimer.interfaces.ownership import OwnershipSource
from nft_claimer.interfaces.store import ClaimStore
from nft_claimer.interfaces.token import PayoutToken
from nft_claimer.models.claims import ClaimEntry, ClaimReceipt, RegistrationResult
from nft_claimer.models.config import ClaimerConfig
from nft_claimer.models.records import ActivityRecord, DeploymentRecord
from nft_claimer.stellar import (
    SorobanDelegationRegistry,
    SorobanNFTOwnership,
    SorobanPayoutToken,
)
from nft_claimer.storage.sqlite import SQLiteClaimStore

log = logging.getLogger(__name__)

NETWORK_PASSPHRASES = {
    "testnet": "Test SDF Network ; September 2015",
    "mainnet": "Public Global Stellar Network ; September 2015",
}


class NFTClaimer:
    """Claimable payouts for NFT controllers.

    The owner registers an amount per (collection, token) with add_claims().
    The token's controller, or a delegate registered for it, withdraws that
    amount once with claim(). Payouts are pulled from the owner's allowance
    to the custody spender at claim time.

    All mutating calls run one at a time under a SerialGuard.
    """

    def __init__(
        self,
        owner: str,
        store: ClaimStore,
        token: PayoutToken,
        ownership: OwnershipSource,
        delegations: DelegationSource,
        spender: str,
        payout_token_id: str = "",
        delegation_registry_id: str = "",
    ) -> None:
        if not owner:
            raise ConfigurationError("an owner address is required")
        self._payout_token_id = payout_token_id
        self._delegation_registry_id = delegation_registry_id
        self._guard = SerialGuard()

        self.store = store
        self.gate = OwnershipGate(owner)
        self.custody = TokenCustody(token, owner, spender)
        self.resolver = DelegationResolver(delegations)
        self.registry = ClaimRegistry(store, self.gate)
        self.processor = ClaimProcessor(
            store, self.registry, ownership, self.resolver, self.custody,
        )
        self._adapters = (token, ownership, delegations)

    @classmethod
    def from_config(cls, cfg: ClaimerConfig) -> NFTClaimer:
        """Build a claimer backed by Soroban contracts and a SQLite store."""
        if not cfg.payout_token:
            raise ConfigurationError("no payout token configured")
        if not cfg.delegation_registry:
            raise ConfigurationError("no delegation registry configured")

        # Without the custody secret the claimer can register and read, not pay out
        spender: Keypair | str
        if cfg.custody_secret:
            spender = Keypair.from_secret(cfg.custody_secret)
            spender_address = spender.public_key
        elif cfg.custody_address:
            spender = spender_address = cfg.custody_address
        else:
            raise ConfigurationError("no custody secret or custody address configured")

        passphrase = cfg.network_passphrase or NETWORK_PASSPHRASES.get(cfg.network, "")

        return cls(
            owner=cfg.owner,
            store=SQLiteClaimStore(cfg.db_path),
            token=SorobanPayoutToken(
                cfg.payout_token, cfg.rpc_url, passphrase, spender=spender,
            ),
            ownership=SorobanNFTOwnership(cfg.rpc_url, passphrase),
            delegations=SorobanDelegationRegistry(
                cfg.delegation_registry, cfg.rpc_url, passphrase,
            ),
            spender=spender_address,
            payout_token_id=cfg.payout_token,
            delegation_registry_id=cfg.delegation_registry,
        )

    async def initialize(self) -> None:
        """Open the store and pin the deployment identities on first use."""
        await self.store.initialize()
        record = DeploymentRecord(
            owner=self.gate.owner,
            payout_token=self._payout_token_id,
            delegation_registry=self._delegation_registry_id,
        )
        existing = await self.store.get_deployment()
        if existing is None:
            await self.store.save_deployment(record)
            log.info("New claimer deployment: owner=%s", self.gate.owner[:16])
            return
        for name in ("owner", "payout_token", "delegation_registry"):
            if getattr(existing, name) != getattr(record, name):
                raise ConfigurationError(
                    f"store was created with {name}={getattr(existing, name)!r},"
                    f" not {getattr(record, name)!r}"
                )

    async def close(self) -> None:
        for adapter in self._adapters:
            closer = getattr(adapter, "close", None)
            if closer is not None:
                await closer()
        await self.store.close()

    async def __aenter__(self) -> NFTClaimer:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ── Core operations ────────────────────────────────────

    def owner(self) -> str:
        return self.gate.owner

    def is_owner(self, address: str) -> bool:
        return self.gate.is_owner(address)

    async def add_claims(
        self,
        caller: str,
        collection: str,
        token_ids: list[int],
        amount_per_token: int,
    ) -> RegistrationResult:
        """Register `amount_per_token` for every token id. Owner only."""
        async with self._guard.hold("add_claims"):
            return await self.registry.register(
                caller, collection, list(token_ids), amount_per_token,
            )

    async def claim(
        self, caller: str, collection: str, token_ids: list[int],
    ) -> ClaimReceipt:
        """Pay the caller everything owed on `token_ids` of `collection`."""
        async with self._guard.hold("claim"):
            return await self.processor.claim(caller, collection, list(token_ids))

    # ── Reads ──────────────────────────────────────────────
    # Reads wait for any claim in flight so they only see committed state.

    async def lookup(self, collection: str, token_id: int) -> ClaimEntry | None:
        async with self._guard.hold("lookup"):
            return await self.registry.lookup(collection, token_id)

    async def entries(
        self, collection: str | None = None, claimed: bool | None = None,
    ) -> list[ClaimEntry]:
        async with self._guard.hold("entries"):
            return await self.registry.entries(collection, claimed)

    async def claimable_total(self, collection: str, token_ids: list[int]) -> int:
        async with self._guard.hold("claimable_total"):
            return await self.registry.claimable_total(collection, list(token_ids))

    async def receipts(self, claimant: str | None = None) -> list[ClaimReceipt]:
        async with self._guard.hold("receipts"):
            return await self.store.get_receipts(claimant)

    async def recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        async with self._guard.hold("recent_activity"):
            return await self.store.get_recent_activity(limit)
