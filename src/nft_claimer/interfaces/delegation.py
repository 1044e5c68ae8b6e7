"""DelegationSource protocol - external delegation registry lookups."""

from __future__ import annotations

from typing import Protocol


class DelegationSource(Protocol):
    """Read-only delegation registry. `vault` is the controller being acted for."""

    async def check_delegate_for_token(
        self, delegate: str, vault: str, collection: str, token_id: int,
    ) -> bool:
        ...

    async def check_delegate_for_collection(
        self, delegate: str, vault: str, collection: str,
    ) -> bool:
        ...

    async def check_delegate_for_all(self, delegate: str, vault: str) -> bool:
        ...
