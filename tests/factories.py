"""Synthetic ledger data for testing."""

from __future__ import annotations

from nft_claimer.models.claims import ClaimEntry, ClaimReceipt

COLLECTION = "CDEAA72F17C397C34B784CA3D37C181048B1DD1DBCOLLECTIONXXXXXXX"
OTHER_COLLECTION = "CBOTHERCOLLECTIONAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"


def make_entry(
    token_id: int = 153,
    amount_owed: int = 10_000_000,
    claimed: bool = False,
    collection: str = COLLECTION,
    claimed_by: str | None = None,
) -> ClaimEntry:
    return ClaimEntry(
        collection=collection,
        token_id=token_id,
        amount_owed=amount_owed,
        claimed=claimed,
        registered_at="2025-01-01T00:00:00+00:00",
        claimed_at="2025-01-02T00:00:00+00:00" if claimed else None,
        claimed_by=claimed_by,
    )


def make_receipt(
    token_ids: list[int] | None = None,
    claimant: str = "GHOLDER",
    amount: int = 20_000_000,
    collection: str = COLLECTION,
) -> ClaimReceipt:
    return ClaimReceipt(
        collection=collection,
        token_ids=token_ids or [153, 159],
        claimant=claimant,
        amount=amount,
        tx_hash="mock_tx_abc123",
    )
