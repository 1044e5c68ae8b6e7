"""Claim core: ledger, authorization, custody and the claim workflow."""

from nft_claimer.claims.custody import TokenCustody
from nft_claimer.claims.delegation import DelegationResolver
from nft_claimer.claims.guard import SerialGuard
from nft_claimer.claims.ownership import OwnershipGate
from nft_claimer.claims.processor import ClaimProcessor
from nft_claimer.claims.registry import ClaimRegistry

__all__ = [
    "TokenCustody",
    "DelegationResolver",
    "SerialGuard",
    "OwnershipGate",
    "ClaimProcessor",
    "ClaimRegistry",
]
