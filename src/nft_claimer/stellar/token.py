"""Soroban payout token - SEP-41 token calls for custody."""

from __future__ import annotations

import logging

from stellar_sdk import Keypair, scval
from stellar_sdk.contract.exceptions import (
    SendTransactionFailedError,
    SimulationFailedError,
    TransactionFailedError,
    TransactionStillPendingError,
)
from stellar_sdk.soroban_rpc import SendTransactionStatus

from nft_claimer.errors import (
    ConfigurationError,
    OracleError,
    TransferFailed,
    TransferOutcomeUnknown,
)
from nft_claimer.models.claims import TransferReceipt
from nft_claimer.stellar.contract import ContractReader

log = logging.getLogger(__name__)


class SorobanPayoutToken:
    """Implements PayoutToken against a SEP-41 token contract.

    Reads are simulated. transfer_from() is signed by the custody spender,
    approve() by the token owner; either signer may be absent when the
    process only needs the other role.
    """

    def __init__(
        self,
        contract_id: str,
        rpc_url: str,
        network_passphrase: str,
        spender: Keypair | str,
        approver: Keypair | None = None,
    ) -> None:
        self._reader = ContractReader(contract_id, rpc_url, network_passphrase)
        self._client = self._reader.client
        if isinstance(spender, Keypair):
            self._spender_keypair: Keypair | None = spender
            self._spender = spender.public_key
        else:
            self._spender_keypair = None
            self._spender = spender
        self._approver = approver

    @property
    def spender(self) -> str:
        return self._spender

    async def close(self) -> None:
        await self._reader.close()

    async def decimals(self) -> int:
        return await self._reader.read("decimals", [], scval.from_uint32)

    async def balance(self, address: str) -> int:
        return await self._reader.read(
            "balance", [scval.to_address(address)], scval.from_int128,
        )

    async def allowance(self, owner: str, spender: str) -> int:
        return await self._reader.read(
            "allowance",
            [scval.to_address(owner), scval.to_address(spender)],
            scval.from_int128,
        )

    async def latest_ledger(self) -> int:
        try:
            resp = await self._client.server.get_latest_ledger()
            return resp.sequence
        except Exception as exc:
            raise OracleError(f"get_latest_ledger failed: {exc}") from exc

    async def transfer_from(self, owner: str, to: str, amount: int) -> TransferReceipt:
        """Build, sign, and submit transfer_from(spender, owner, to, amount)."""
        if self._spender_keypair is None:
            raise ConfigurationError("transfer_from needs the custody spender's secret")

        log.info("Submitting transfer_from: %d to %s", amount, to[:16])
        tx = None
        try:
            tx = await self._client.invoke(
                "transfer_from",
                [
                    scval.to_address(self._spender),
                    scval.to_address(owner),
                    scval.to_address(to),
                    scval.to_int128(amount),
                ],
                source=self._spender,
                signer=self._spender_keypair,
            )
            await tx.sign_and_submit()
        except SimulationFailedError as exc:
            log.warning("transfer_from simulation failed: %s", exc)
            raise TransferFailed(f"simulation_failed: {exc}") from exc
        except SendTransactionFailedError as exc:
            response = exc.assembled_transaction.send_transaction_response
            tx_hash = _sent_hash(exc.assembled_transaction)
            if response is not None and response.status == SendTransactionStatus.DUPLICATE:
                raise TransferOutcomeUnknown(
                    f"duplicate submission: {tx_hash}", tx_hash=tx_hash,
                ) from exc
            log.warning("transfer_from not accepted by RPC: %s", exc)
            raise TransferFailed(f"send_failed: {exc}") from exc
        except TransactionFailedError as exc:
            tx_hash = ""
            if exc.assembled_transaction.send_transaction_response:
                tx_hash = exc.assembled_transaction.send_transaction_response.hash
            log.error("transfer_from tx failed (tx=%s)", tx_hash[:16] if tx_hash else "?")
            raise TransferFailed(f"tx_failed: {tx_hash or exc}") from exc
        except TransactionStillPendingError as exc:
            tx_hash = _sent_hash(exc.assembled_transaction)
            log.error("transfer_from still pending (tx=%s)", tx_hash or "?")
            raise TransferOutcomeUnknown(
                f"transaction still pending: {tx_hash or exc}", tx_hash=tx_hash,
            ) from exc
        except Exception as exc:
            # Once sent, the transfer may still land on chain
            tx_hash = _sent_hash(tx)
            if tx_hash:
                log.error("transfer_from outcome unknown (tx=%s): %s", tx_hash, exc)
                raise TransferOutcomeUnknown(
                    f"sent as {tx_hash}, result unknown: {exc}", tx_hash=tx_hash,
                ) from exc
            log.error("transfer_from unexpected error: %s", exc)
            raise TransferFailed(str(exc)) from exc

        tx_hash = None
        if tx.send_transaction_response:
            tx_hash = tx.send_transaction_response.hash
        return TransferReceipt(to=to, amount=amount, tx_hash=tx_hash)

    async def approve(self, amount: int, expiration_ledger: int) -> str | None:
        """Owner grants the custody spender an allowance of `amount`."""
        if self._approver is None:
            raise ConfigurationError("approve needs the token owner's secret")

        owner = self._approver.public_key
        log.info("Approving %d for %s until ledger %d", amount, self._spender[:16], expiration_ledger)
        tx = await self._client.invoke(
            "approve",
            [
                scval.to_address(owner),
                scval.to_address(self._spender),
                scval.to_int128(amount),
                scval.to_uint32(expiration_ledger),
            ],
            source=owner,
            signer=self._approver,
        )
        await tx.sign_and_submit()
        if tx.send_transaction_response:
            return tx.send_transaction_response.hash
        return None


def _sent_hash(tx) -> str | None:
    """Hash of a submitted transaction, or None if it was never sent."""
    response = getattr(tx, "send_transaction_response", None)
    if response is None:
        return None
    return response.hash or None
