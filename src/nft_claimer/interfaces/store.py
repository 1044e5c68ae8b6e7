"""ClaimStore protocol - persists the claim ledger, receipts and activity."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from nft_claimer.models.claims import ClaimEntry, ClaimReceipt
from nft_claimer.models.records import ActivityRecord, DeploymentRecord


class ClaimStore(Protocol):
    """Persists the claim ledger. Writes inside transaction() commit together."""

    # ── Lifecycle ──────────────────────────────────────────

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        ...

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Commit on clean exit, roll back and re-raise on error."""
        ...

    # ── Deployment ─────────────────────────────────────────

    async def get_deployment(self) -> DeploymentRecord | None:
        ...

    async def save_deployment(self, record: DeploymentRecord) -> None:
        ...

    # ── Claim entries ──────────────────────────────────────

    async def upsert_entries(
        self, collection: str, token_ids: list[int], amount: int,
    ) -> None:
        ...

    async def get_entry(self, collection: str, token_id: int) -> ClaimEntry | None:
        ...

    async def get_entries(
        self, collection: str, token_ids: list[int],
    ) -> dict[int, ClaimEntry]:
        ...

    async def list_entries(
        self, collection: str | None = None, claimed: bool | None = None,
    ) -> list[ClaimEntry]:
        ...

    async def mark_claimed(
        self, collection: str, token_ids: list[int], claimant: str,
    ) -> list[int]:
        """Flip unclaimed, non-zero entries to claimed. Returns the ids changed."""
        ...

    # ── Receipts ───────────────────────────────────────────

    async def save_receipt(self, receipt: ClaimReceipt) -> None:
        ...

    async def get_receipts(self, claimant: str | None = None) -> list[ClaimReceipt]:
        ...

    # ── Activity log ───────────────────────────────────────

    async def log_activity(
        self,
        event_type: str,
        message: str,
        collection: str | None = None,
        token_ids: list[int] | None = None,
        amount: int | None = None,
        actor: str | None = None,
    ) -> None:
        ...

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        ...
