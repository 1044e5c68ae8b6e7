"""Delegation resolver - may a caller act for an NFT's controller?"""

from __future__ import annotations

import logging

from nft_claimer.interfaces.delegation import DelegationSource
from nft_claimer.models.config import DelegationScope

log = logging.getLogger(__name__)


class DelegationResolver:
    """Resolves caller authority against the external delegation registry.

    Resolution order:
    1. Caller is the controller itself
    2. Token-level delegation
    3. Collection-level delegation
    4. Wallet-wide delegation

    Any registry error denies access.
    """

    def __init__(self, source: DelegationSource) -> None:
        self._source = source

    async def resolve(
        self, caller: str, controller: str, collection: str, token_id: int,
    ) -> DelegationScope | None:
        """Return the scope that grants access, or None if nothing does."""
        if caller == controller:
            return DelegationScope.SELF

        checks = (
            (DelegationScope.TOKEN, lambda: self._source.check_delegate_for_token(
                caller, controller, collection, token_id)),
            (DelegationScope.COLLECTION, lambda: self._source.check_delegate_for_collection(
                caller, controller, collection)),
            (DelegationScope.ALL, lambda: self._source.check_delegate_for_all(
                caller, controller)),
        )
        for scope, check in checks:
            try:
                granted = await check()
            except Exception as exc:
                log.warning(
                    "Delegation lookup (%s) failed for %s on token %d: %s",
                    scope.value, caller[:16], token_id, exc,
                )
                return None
            if granted is True:
                log.debug(
                    "%s acts for %s on token %d via %s delegation",
                    caller[:16], controller[:16], token_id, scope.value,
                )
                return scope
        return None

    async def is_authorized(
        self, caller: str, controller: str, collection: str, token_id: int,
    ) -> bool:
        return await self.resolve(caller, controller, collection, token_id) is not None
