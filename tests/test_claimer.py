"""NFTClaimer wiring: owner identity, deployment record and construction."""

from __future__ import annotations

import pytest

from nft_claimer.claimer import NFTClaimer
from nft_claimer.errors import ConfigurationError
from nft_claimer.storage.sqlite import SQLiteClaimStore
from tests.conftest import (
    CUSTODY,
    DELEGATION_REGISTRY,
    OWNER,
    PAYOUT_TOKEN,
    STRANGER,
    make_test_config,
)
from tests.mocks import MockDelegations, MockOwnership, MockToken


def _build(store, owner=OWNER, payout_token=PAYOUT_TOKEN) -> NFTClaimer:
    return NFTClaimer(
        owner=owner,
        store=store,
        token=MockToken(),
        ownership=MockOwnership(),
        delegations=MockDelegations(),
        spender=CUSTODY,
        payout_token_id=payout_token,
        delegation_registry_id=DELEGATION_REGISTRY,
    )


async def test_owner_exposed(claimer):
    assert claimer.owner() == OWNER
    assert claimer.is_owner(OWNER)
    assert not claimer.is_owner(STRANGER)


async def test_first_initialize_records_deployment(claimer, store):
    record = await store.get_deployment()
    assert record.owner == OWNER
    assert record.payout_token == PAYOUT_TOKEN
    assert record.delegation_registry == DELEGATION_REGISTRY


async def test_reopen_with_same_identities(tmp_path):
    db_path = str(tmp_path / "claims.db")
    async with _build(SQLiteClaimStore(db_path)):
        pass
    async with _build(SQLiteClaimStore(db_path)) as claimer:
        assert claimer.owner() == OWNER


@pytest.mark.parametrize("field", ["owner", "payout_token"])
async def test_reopen_with_other_identity_rejected(tmp_path, field):
    db_path = str(tmp_path / "claims.db")
    async with _build(SQLiteClaimStore(db_path)):
        pass

    kwargs = {field: STRANGER if field == "owner" else "COTHERTOKEN"}
    store = SQLiteClaimStore(db_path)
    claimer = _build(store, **kwargs)
    with pytest.raises(ConfigurationError):
        await claimer.initialize()
    await claimer.close()


def test_owner_required(store):
    with pytest.raises(ConfigurationError):
        _build(store, owner="")


def test_from_config_requires_custody():
    cfg = make_test_config(custody_address="", custody_secret="")
    with pytest.raises(ConfigurationError):
        NFTClaimer.from_config(cfg)


def test_from_config_requires_token():
    with pytest.raises(ConfigurationError):
        NFTClaimer.from_config(make_test_config(payout_token=""))
