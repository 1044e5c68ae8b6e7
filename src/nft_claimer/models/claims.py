"""Ledger record types for claim entries and completed claims."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ClaimEntry:
    """Amount owed to the controller of one NFT, with a one-way claimed flag."""

    collection: str  # NFT collection contract id
    token_id: int
    amount_owed: int  # base units of the payout token
    claimed: bool = False
    registered_at: str = ""
    claimed_at: str | None = None
    claimed_by: str | None = None

    @property
    def claimable(self) -> bool:
        return not self.claimed and self.amount_owed > 0


@dataclass
class TransferReceipt:
    """Result of a transfer_from() pulled from the owner's allowance."""

    to: str
    amount: int
    tx_hash: str | None = None


@dataclass
class ClaimReceipt:
    """A successful claim() call: every token in the batch paid in one transfer."""

    collection: str
    token_ids: list[int]
    claimant: str
    amount: int
    tx_hash: str | None = None
    claimed_at: str = ""
    id: int | None = None


@dataclass
class RegistrationResult:
    """Outcome of an add_claims() call."""

    collection: str
    token_ids: list[int] = field(default_factory=list)
    amount_per_token: int = 0

    @property
    def total(self) -> int:
        return self.amount_per_token * len(self.token_ids)
