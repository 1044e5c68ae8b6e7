"""Shared plumbing for simulation-only contract reads."""

from __future__ import annotations

import logging
from typing import Callable, Sequence, TypeVar

from stellar_sdk import Address, xdr
from stellar_sdk.contract import ContractClientAsync

from nft_claimer.errors import OracleError

log = logging.getLogger(__name__)

T = TypeVar("T")


def addr_str(addr: object) -> str:
    """Extract string address from Address or str."""
    if isinstance(addr, Address):
        return addr.address
    return str(addr)


class ContractReader:
    """Read-only calls against one Soroban contract.

    Calls are simulated, never signed or submitted. Failures surface as
    OracleError so the core can decide how to treat them.
    """

    def __init__(self, contract_id: str, rpc_url: str, network_passphrase: str) -> None:
        self.contract_id = contract_id
        self.client = ContractClientAsync(
            contract_id=contract_id,
            rpc_url=rpc_url,
            network_passphrase=network_passphrase,
        )

    async def read(
        self,
        function_name: str,
        parameters: Sequence[xdr.SCVal],
        parse: Callable[[xdr.SCVal], T],
    ) -> T:
        try:
            tx = await self.client.invoke(
                function_name, list(parameters), parse_result_xdr_fn=parse,
            )
            return tx.result()
        except Exception as exc:
            log.warning(
                "%s() on %s failed: %s", function_name, self.contract_id[:16], exc,
            )
            raise OracleError(f"{function_name}() on {self.contract_id} failed: {exc}") from exc

    async def close(self) -> None:
        """Close the underlying aiohttp session."""
        try:
            await self.client.server.close()
        except Exception:
            pass

