"""Soroban delegation registry queries."""

from __future__ import annotations

from stellar_sdk import scval

from nft_claimer.stellar.contract import ContractReader


class SorobanDelegationRegistry:
    """Implements DelegationSource against a delegation registry contract.

    Each check_* call is a pure read returning a bool.
    """

    def __init__(self, contract_id: str, rpc_url: str, network_passphrase: str) -> None:
        self._reader = ContractReader(contract_id, rpc_url, network_passphrase)

    async def check_delegate_for_token(
        self, delegate: str, vault: str, collection: str, token_id: int,
    ) -> bool:
        return await self._reader.read(
            "check_delegate_for_token",
            [
                scval.to_address(delegate),
                scval.to_address(vault),
                scval.to_address(collection),
                scval.to_uint32(token_id),
            ],
            scval.from_bool,
        )

    async def check_delegate_for_collection(
        self, delegate: str, vault: str, collection: str,
    ) -> bool:
        return await self._reader.read(
            "check_delegate_for_contract",
            [
                scval.to_address(delegate),
                scval.to_address(vault),
                scval.to_address(collection),
            ],
            scval.from_bool,
        )

    async def check_delegate_for_all(self, delegate: str, vault: str) -> bool:
        return await self._reader.read(
            "check_delegate_for_all",
            [scval.to_address(delegate), scval.to_address(vault)],
            scval.from_bool,
        )

    async def close(self) -> None:
        await self._reader.close()
