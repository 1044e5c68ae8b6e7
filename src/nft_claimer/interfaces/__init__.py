"""Protocol interfaces for all nft_claimer collaborators."""

from nft_claimer.interfaces.token import PayoutToken
from nft_claimer.interfaces.ownership import OwnershipSource
from nft_claimer.interfaces.delegation import DelegationSource
from nft_claimer.interfaces.store import ClaimStore

__all__ = [
    "PayoutToken",
    "OwnershipSource",
    "DelegationSource",
    "ClaimStore",
]
