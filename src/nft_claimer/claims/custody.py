"""Token custody - pays claims out of the owner's standing allowance."""

from __future__ import annotations

import logging
from decimal import Decimal

from nft_claimer.errors import ArgumentMismatch, InsufficientAllowance
from nft_claimer.interfaces.token import PayoutToken
from nft_claimer.models.claims import TransferReceipt

log = logging.getLogger(__name__)


class TokenCustody:
    """Moves the payout token with the allowance-pull model.

    Funds never sit with the claimer. The owner approves the custody spender
    up front and every payout is pulled straight from the owner to the
    claimant. The allowance is only checked at payout time, so registered
    amounts may exceed it; such claims fail with InsufficientAllowance until
    the owner approves more.
    """

    def __init__(self, token: PayoutToken, owner: str, spender: str) -> None:
        self._token = token
        self._owner = owner
        self._spender = spender
        self._decimals: int | None = None

    @property
    def spender(self) -> str:
        return self._spender

    async def decimals(self) -> int:
        if self._decimals is None:
            self._decimals = await self._token.decimals()
        return self._decimals

    async def to_base_units(self, whole: Decimal | int | str) -> int:
        """Scale a whole-token amount by 10**decimals."""
        scaled = Decimal(whole) * (Decimal(10) ** await self.decimals())
        if scaled != scaled.to_integral_value():
            raise ArgumentMismatch(f"{whole} has more precision than the token supports")
        return int(scaled)

    async def allowance(self) -> int:
        return await self._token.allowance(self._owner, self._spender)

    async def balance(self) -> int:
        return await self._token.balance(self._owner)

    async def reserve(self, amount: int) -> int:
        """Check the standing allowance covers `amount`. Returns the allowance."""
        available = await self.allowance()
        if available < amount:
            log.info("Allowance %d below required %d", available, amount)
            raise InsufficientAllowance(required=amount, available=available)
        return available

    async def payout(self, to: str, amount: int) -> TransferReceipt:
        """Pull `amount` from the owner's allowance directly to `to`."""
        if amount <= 0:
            raise ArgumentMismatch(f"payout amount must be positive, got {amount}")
        await self.reserve(amount)
        receipt = await self._token.transfer_from(self._owner, to, amount)
        log.info(
            "Paid %d to %s (tx=%s)",
            amount, to[:16], receipt.tx_hash[:16] if receipt.tx_hash else "?",
        )
        return receipt
