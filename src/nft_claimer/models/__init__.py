"""Data models for the nft_claimer service."""

from nft_claimer.models.claims import (
    ClaimEntry,
    ClaimReceipt,
    RegistrationResult,
    TransferReceipt,
)
from nft_claimer.models.records import ActivityRecord, DeploymentRecord
from nft_claimer.models.config import ClaimerConfig, DelegationScope

__all__ = [
    "ClaimEntry", "ClaimReceipt", "RegistrationResult", "TransferReceipt",
    "ActivityRecord", "DeploymentRecord",
    "ClaimerConfig", "DelegationScope",
]
