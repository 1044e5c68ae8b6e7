"""nft_claimer - per-NFT token claims with delegation-aware payout."""

__version__ = "0.1.0"
