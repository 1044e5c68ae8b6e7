"""Shared fixtures for nft_claimer tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from nft_claimer.claimer import NFTClaimer
from nft_claimer.models.config import ClaimerConfig
from nft_claimer.storage.sqlite import SQLiteClaimStore

from tests.factories import COLLECTION
from tests.mocks import MockDelegations, MockOwnership, MockToken

TEST_SECRET = "SBWVJTD3F5ETMVWCNI7MM4HUAPUSCUXXMUEJZJTPRWRJGXW2BF4SVQTK"
TEST_PUBLIC = "GDNAG4KFFVF5HCSGRWZIXZNL2SR2KBGJSHW2A6FI6DZI62XF6IBLO4GD"

OWNER = TEST_PUBLIC
CUSTODY = "GCUSTODYSPENDERXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"
HOLDER = "GHOLDER153AND159XXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"
HOLDER_160 = "GHOLDER160XXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"
STRANGER = "GSTRANGERXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"
DELEGATE = "GDELEGATEXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"

PAYOUT_TOKEN = "CPAYOUTTOKENXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"
DELEGATION_REGISTRY = "CDELEGATIONREGISTRYXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"

DECIMALS = 7
D = 10 ** DECIMALS  # one whole payout token

SCENARIO_TOKENS = [153, 160, 159]


def pytest_configure(config):
    """Add deployment info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "in-memory mocks"
    meta["Payout Token"] = PAYOUT_TOKEN
    meta["Delegation Registry"] = DELEGATION_REGISTRY
    meta["Owner"] = OWNER


def make_test_config(**overrides) -> ClaimerConfig:
    """Build a ClaimerConfig suitable for testing."""
    defaults = dict(
        owner=OWNER,
        network="testnet",
        rpc_url="https://soroban-testnet.stellar.org",
        network_passphrase="Test SDF Network ; September 2015",
        payout_token=PAYOUT_TOKEN,
        delegation_registry=DELEGATION_REGISTRY,
        secret=TEST_SECRET,
        custody_address=CUSTODY,
        db_path=":memory:",
    )
    defaults.update(overrides)
    return ClaimerConfig(**defaults)


@pytest.fixture
def test_config():
    """Default ClaimerConfig for tests."""
    return make_test_config()


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteClaimStore."""
    s = SQLiteClaimStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def mock_token():
    token = MockToken(
        decimals=DECIMALS,
        balances={OWNER: 1_000 * D},
        allowances={(OWNER, CUSTODY): 3 * D},
    )
    token.spender = CUSTODY
    return token


@pytest.fixture
def mock_ownership():
    return MockOwnership({
        (COLLECTION, 153): HOLDER,
        (COLLECTION, 159): HOLDER,
        (COLLECTION, 160): HOLDER_160,
    })


@pytest.fixture
def mock_delegations():
    return MockDelegations()


@pytest.fixture
async def claimer(store, mock_token, mock_ownership, mock_delegations):
    """Fully wired NFTClaimer with mocked collaborators."""
    c = NFTClaimer(
        owner=OWNER,
        store=store,
        token=mock_token,
        ownership=mock_ownership,
        delegations=mock_delegations,
        spender=CUSTODY,
        payout_token_id=PAYOUT_TOKEN,
        delegation_registry_id=DELEGATION_REGISTRY,
    )
    await c.initialize()
    return c


@pytest.fixture
async def registered(claimer):
    """Claimer with tokens 153, 160 and 159 registered at one whole token each."""
    await claimer.add_claims(OWNER, COLLECTION, SCENARIO_TOKENS, D)
    return claimer
