"""Registration: owner gating, overwrite rules and argument checks."""

from __future__ import annotations

import pytest

from nft_claimer.errors import AlreadyClaimed, ArgumentMismatch, Unauthorized
from tests.conftest import D, HOLDER, OWNER, SCENARIO_TOKENS, STRANGER
from tests.factories import COLLECTION


async def test_owner_registers_entries(claimer):
    result = await claimer.add_claims(OWNER, COLLECTION, SCENARIO_TOKENS, D)

    assert result.token_ids == SCENARIO_TOKENS
    assert result.total == 3 * D
    for token_id in SCENARIO_TOKENS:
        entry = await claimer.lookup(COLLECTION, token_id)
        assert entry is not None
        assert entry.amount_owed == D
        assert not entry.claimed
        assert entry.claimable


async def test_non_owner_cannot_register(claimer, store):
    with pytest.raises(Unauthorized):
        await claimer.add_claims(STRANGER, COLLECTION, [1, 2], D)

    assert await claimer.entries() == []
    activity = await store.get_recent_activity()
    assert [a.event_type for a in activity] == ["register_failed"]
    assert activity[0].actor == STRANGER
    assert activity[0].message.startswith("unauthorized:")


async def test_non_owner_cannot_overwrite(registered):
    before = await registered.entries()

    with pytest.raises(Unauthorized):
        await registered.add_claims(HOLDER, COLLECTION, [153], 1_000 * D)

    assert await registered.entries() == before


async def test_reregistering_unclaimed_overwrites(registered):
    await registered.add_claims(OWNER, COLLECTION, [160], 5 * D)

    entry = await registered.lookup(COLLECTION, 160)
    assert entry.amount_owed == 5 * D
    assert not entry.claimed


async def test_reregistering_claimed_rejected(registered):
    await registered.claim(HOLDER, COLLECTION, [153])

    with pytest.raises(AlreadyClaimed) as exc_info:
        await registered.add_claims(OWNER, COLLECTION, [160, 153], 5 * D)

    assert exc_info.value.token_ids == [153]
    entry_153 = await registered.lookup(COLLECTION, 153)
    assert entry_153.claimed and entry_153.amount_owed == D
    # The unclaimed half of the batch was not written either
    assert (await registered.lookup(COLLECTION, 160)).amount_owed == D


async def test_duplicate_ids_collapse(claimer):
    result = await claimer.add_claims(OWNER, COLLECTION, [5, 5, 6], D)

    assert result.token_ids == [5, 6]
    assert len(await claimer.entries(COLLECTION)) == 2


@pytest.mark.parametrize(
    "token_ids, amount",
    [
        ([], 1),
        ([1, -2], 1),
        ([1], -1),
        (["1"], 1),
        ([1], 1.5),
    ],
)
async def test_bad_arguments_rejected(claimer, token_ids, amount):
    with pytest.raises(ArgumentMismatch):
        await claimer.add_claims(OWNER, COLLECTION, token_ids, amount)

    assert await claimer.entries() == []


async def test_claimable_total(registered):
    await registered.claim(HOLDER, COLLECTION, [153])

    assert await registered.claimable_total(COLLECTION, [153, 159, 160, 999]) == 2 * D


async def test_entries_filters(registered):
    await registered.claim(HOLDER, COLLECTION, [153])

    open_entries = await registered.entries(COLLECTION, claimed=False)
    assert [e.token_id for e in open_entries] == [159, 160]
    done = await registered.entries(claimed=True)
    assert [e.token_id for e in done] == [153]


async def test_rejected_registrations_are_logged(registered, store):
    await registered.claim(HOLDER, COLLECTION, [153])

    with pytest.raises(AlreadyClaimed):
        await registered.add_claims(OWNER, COLLECTION, [153], 5 * D)
    with pytest.raises(ArgumentMismatch):
        await registered.add_claims(OWNER, COLLECTION, [], 5 * D)

    failures = [
        a for a in await store.get_recent_activity() if a.event_type == "register_failed"
    ]
    assert [a.message.split(":")[0] for a in failures] == [
        "argument_mismatch", "already_claimed",
    ]
    assert failures[1].token_ids == "153"
    assert failures[0].token_ids is None
