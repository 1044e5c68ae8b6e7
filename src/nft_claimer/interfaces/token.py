"""PayoutToken protocol - the fungible asset claims are paid in."""

from __future__ import annotations

from typing import Protocol

from nft_claimer.models.claims import TransferReceipt


class PayoutToken(Protocol):
    """SEP-41 style token seen from the custody spender's side."""

    async def decimals(self) -> int:
        ...

    async def balance(self, address: str) -> int:
        ...

    async def allowance(self, owner: str, spender: str) -> int:
        """Amount `spender` may still pull from `owner`."""
        ...

    async def transfer_from(self, owner: str, to: str, amount: int) -> TransferReceipt:
        """Pull `amount` from `owner` to `to`, signed by the spender."""
        ...

    async def approve(self, amount: int, expiration_ledger: int) -> str | None:
        """Grant the spender an allowance, signed by the owner. Returns tx hash."""
        ...
