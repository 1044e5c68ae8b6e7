"""Exception types raised by the claim core and its adapters.

Every failure aborts the whole operation. ``retryable`` marks the conditions
that can clear on their own (allowance topped up, RPC reachable again); all
others are permanent for the same arguments.
"""

from __future__ import annotations


class ClaimerError(Exception):
    """Base class for all nft_claimer failures."""

    code = "claimer_error"
    retryable = False


class Unauthorized(ClaimerError):
    """A non-administrator attempted a restricted mutation."""

    code = "unauthorized"

    def __init__(self, caller: str, owner: str) -> None:
        super().__init__(f"{caller} is not the claimer owner")
        self.caller = caller
        self.owner = owner


class NotAuthorized(ClaimerError):
    """Caller is neither the NFT's controller nor one of its delegates."""

    code = "not_authorized"

    def __init__(self, caller: str, collection: str, token_id: int) -> None:
        super().__init__(
            f"{caller} may not claim token {token_id} of {collection}"
        )
        self.caller = caller
        self.collection = collection
        self.token_id = token_id


class AlreadyClaimedOrNotRegistered(ClaimerError):
    """Token has no claimable entry (absent, zero, already claimed, or repeated)."""

    code = "already_claimed_or_not_registered"

    def __init__(self, collection: str, token_id: int) -> None:
        super().__init__(
            f"token {token_id} of {collection} is already claimed or not registered"
        )
        self.collection = collection
        self.token_id = token_id


class AlreadyClaimed(ClaimerError):
    """Registration tried to overwrite an entry that was already paid out."""

    code = "already_claimed"

    def __init__(self, collection: str, token_ids: list[int]) -> None:
        ids = ", ".join(str(t) for t in token_ids)
        super().__init__(f"tokens already claimed on {collection}: {ids}")
        self.collection = collection
        self.token_ids = token_ids


class InsufficientAllowance(ClaimerError):
    """Owner's standing allowance to custody does not cover the payout."""

    code = "insufficient_allowance"
    retryable = True

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            f"allowance {available} is below required payout {required}"
        )
        self.required = required
        self.available = available


class TransferFailed(ClaimerError):
    """The payout token rejected the transfer_from() call."""

    code = "transfer_failed"
    retryable = True


class ArgumentMismatch(ClaimerError):
    """Batch arguments have an invalid shape or value."""

    code = "argument_mismatch"


class ReentrantCall(ClaimerError):
    """A claimer operation was invoked while another is still in progress on the same task."""

    code = "reentrant_call"


class OracleError(ClaimerError):
    """A contract query could not be completed or decoded."""

    code = "oracle_error"
    retryable = True


class ConfigurationError(ClaimerError):
    """Missing settings, or a store opened against a different deployment."""

    code = "configuration_error"


class TransferOutcomeUnknown(ClaimerError):
    """transfer_from() was sent but its result could not be confirmed.

    The payout may still land, so the entries stay claimed. Check the
    transaction by hash before paying anything for these tokens again.
    """

    code = "transfer_outcome_unknown"

    def __init__(self, message: str, tx_hash: str | None = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash
