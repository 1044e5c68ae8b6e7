"""Configuration models for the claimer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DelegationScope(str, Enum):
    """Level at which a caller was found to act for an NFT's controller."""

    SELF = "self"  # caller is the controller
    TOKEN = "token"
    COLLECTION = "collection"
    ALL = "all"  # wallet-wide delegation


@dataclass
class ClaimerConfig:
    """Complete claimer configuration."""

    # Claimer
    owner: str = ""  # administrator address
    log_level: str = "info"

    # Stellar
    network: str = "testnet"
    rpc_url: str = "https://soroban-testnet.stellar.org"
    network_passphrase: str = "Test SDF Network ; September 2015"
    payout_token: str = ""  # SEP-41 token contract id
    delegation_registry: str = ""  # delegation registry contract id
    secret: str = ""  # acting wallet, loaded from NFT_CLAIMER_SECRET
    custody_secret: str = ""  # spender key, loaded from NFT_CLAIMER_CUSTODY_SECRET
    custody_address: str = ""  # spender address, derived from custody_secret when set

    # Storage
    db_path: str = "~/.nft_claimer/claims.db"
