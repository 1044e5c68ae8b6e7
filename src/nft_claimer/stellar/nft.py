"""Soroban NFT ownership lookups."""

from __future__ import annotations

from stellar_sdk import scval

from nft_claimer.stellar.contract import ContractReader, addr_str


class SorobanNFTOwnership:
    """Implements OwnershipSource via owner_of(token_id) on each collection.

    One reader per collection contract, created on first use.
    """

    def __init__(self, rpc_url: str, network_passphrase: str) -> None:
        self._rpc_url = rpc_url
        self._network_passphrase = network_passphrase
        self._readers: dict[str, ContractReader] = {}

    def _reader(self, collection: str) -> ContractReader:
        reader = self._readers.get(collection)
        if reader is None:
            reader = ContractReader(collection, self._rpc_url, self._network_passphrase)
            self._readers[collection] = reader
        return reader

    async def controller_of(self, collection: str, token_id: int) -> str:
        return await self._reader(collection).read(
            "owner_of",
            [scval.to_uint32(token_id)],
            lambda v: addr_str(scval.from_address(v)),
        )

    async def close(self) -> None:
        for reader in self._readers.values():
            await reader.close()
        self._readers.clear()
