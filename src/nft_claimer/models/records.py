"""Internal record types for state persistence."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class DeploymentRecord:
    """Identities fixed when the claimer is first constructed."""

    owner: str
    payout_token: str
    delegation_registry: str
    created_at: str = ""


@dataclass
class ActivityRecord:
    """A single activity log entry."""

    id: int
    event_type: str
    collection: str | None
    token_ids: str | None  # comma separated
    amount: int | None  # base units
    actor: str | None
    message: str
    created_at: str
