"""Ownership gate - the single administrator of the claimer."""

from __future__ import annotations

import logging

from nft_claimer.errors import Unauthorized

log = logging.getLogger(__name__)


class OwnershipGate:
    """Holds the administrator identity and gates restricted mutations."""

    def __init__(self, owner: str) -> None:
        self._owner = owner

    @property
    def owner(self) -> str:
        return self._owner

    def is_owner(self, address: str) -> bool:
        return address == self._owner

    def require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            log.warning("Rejected restricted call from %s", caller[:16])
            raise Unauthorized(caller, self._owner)
