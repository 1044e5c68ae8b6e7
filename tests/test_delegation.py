"""DelegationResolver: scope precedence and fail-closed lookups."""

from __future__ import annotations

from nft_claimer.claims.delegation import DelegationResolver
from nft_claimer.models.config import DelegationScope
from tests.conftest import DELEGATE, HOLDER, STRANGER
from tests.factories import COLLECTION, OTHER_COLLECTION
from tests.mocks import MockDelegations


async def test_controller_needs_no_registry():
    source = MockDelegations()
    resolver = DelegationResolver(source)

    assert await resolver.resolve(HOLDER, HOLDER, COLLECTION, 1) == DelegationScope.SELF
    assert source.calls == []


async def test_token_delegation_checked_first():
    source = MockDelegations()
    source.delegate_token(DELEGATE, HOLDER, COLLECTION, 1)
    source.delegate_all(DELEGATE, HOLDER)
    resolver = DelegationResolver(source)

    assert await resolver.resolve(DELEGATE, HOLDER, COLLECTION, 1) == DelegationScope.TOKEN
    assert source.calls == ["token"]


async def test_collection_before_wallet():
    source = MockDelegations()
    source.delegate_collection(DELEGATE, HOLDER, COLLECTION)
    source.delegate_all(DELEGATE, HOLDER)
    resolver = DelegationResolver(source)

    assert await resolver.resolve(DELEGATE, HOLDER, COLLECTION, 1) == DelegationScope.COLLECTION
    assert source.calls == ["token", "collection"]


async def test_wallet_delegation_last():
    source = MockDelegations()
    source.delegate_all(DELEGATE, HOLDER)
    resolver = DelegationResolver(source)

    assert await resolver.resolve(DELEGATE, HOLDER, COLLECTION, 1) == DelegationScope.ALL
    assert source.calls == ["token", "collection", "all"]


async def test_delegation_is_scoped():
    source = MockDelegations()
    source.delegate_token(DELEGATE, HOLDER, COLLECTION, 1)
    source.delegate_collection(DELEGATE, HOLDER, OTHER_COLLECTION)
    resolver = DelegationResolver(source)

    assert not await resolver.is_authorized(DELEGATE, HOLDER, COLLECTION, 2)
    # Delegation for a different vault grants nothing
    assert not await resolver.is_authorized(DELEGATE, STRANGER, COLLECTION, 1)


async def test_registry_error_denies():
    source = MockDelegations(error=True)
    source.delegate_all(DELEGATE, HOLDER)
    resolver = DelegationResolver(source)

    assert await resolver.resolve(DELEGATE, HOLDER, COLLECTION, 1) is None
    assert source.calls == ["token"]
