"""OwnershipSource protocol - who controls an NFT right now."""

from __future__ import annotations

from typing import Protocol


class OwnershipSource(Protocol):
    """Reads the current owner of a token from its collection contract."""

    async def controller_of(self, collection: str, token_id: int) -> str:
        ...
