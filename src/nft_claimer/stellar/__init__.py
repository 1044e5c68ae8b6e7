"""Stellar/Soroban adapters for the claimer's external collaborators."""

from nft_claimer.stellar.token import SorobanPayoutToken
from nft_claimer.stellar.nft import SorobanNFTOwnership
from nft_claimer.stellar.delegation import SorobanDelegationRegistry

__all__ = ["SorobanPayoutToken", "SorobanNFTOwnership", "SorobanDelegationRegistry"]
