"""Configuration loading from TOML, env vars and deployments.json."""

from __future__ import annotations

import json

import pytest

from nft_claimer.config import load_config
from tests.conftest import TEST_PUBLIC, TEST_SECRET

ENV_VARS = [
    "SECRET", "CUSTODY_SECRET", "OWNER", "NETWORK", "RPC_URL",
    "PAYOUT_TOKEN", "DELEGATION_REGISTRY", "DB_PATH",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(f"NFT_CLAIMER_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults():
    cfg = load_config(None)
    assert cfg.network == "testnet"
    assert cfg.owner == ""
    assert cfg.db_path.endswith("claims.db")


def test_toml_sections(tmp_path):
    path = tmp_path / "claimer.toml"
    path.write_text(
        '[claimer]\nowner = "GOWNER"\n'
        '[stellar]\nnetwork = "mainnet"\npayout_token = "CTOKEN"\n'
        'delegation_registry = "CREG"\ncustody_address = "GCUSTODY"\n'
        '[storage]\ndb_path = ":memory:"\n'
    )

    cfg = load_config(path)

    assert cfg.owner == "GOWNER"
    assert cfg.network == "mainnet"
    assert cfg.network_passphrase == "Public Global Stellar Network ; September 2015"
    assert cfg.payout_token == "CTOKEN"
    assert cfg.delegation_registry == "CREG"
    assert cfg.custody_address == "GCUSTODY"
    assert cfg.db_path == ":memory:"


def test_env_overrides_toml(tmp_path, monkeypatch):
    path = tmp_path / "claimer.toml"
    path.write_text('[claimer]\nowner = "GOWNER"\n')
    monkeypatch.setenv("NFT_CLAIMER_OWNER", "GENVOWNER")
    monkeypatch.setenv("NFT_CLAIMER_SECRET", TEST_SECRET)

    cfg = load_config(path)

    assert cfg.owner == "GENVOWNER"
    assert cfg.secret == TEST_SECRET


def test_custody_address_derived_from_secret(monkeypatch):
    monkeypatch.setenv("NFT_CLAIMER_CUSTODY_SECRET", TEST_SECRET)

    cfg = load_config(None)

    assert cfg.custody_address == TEST_PUBLIC


def test_deployments_fill_missing_contracts(tmp_path):
    (tmp_path / "deployments.json").write_text(json.dumps({
        "testnet": {"payout_token": "CTESTTOKEN", "delegation_registry": "CTESTREG"},
        "mainnet": {"payout_token": "CMAINTOKEN", "delegation_registry": "CMAINREG"},
    }))
    path = tmp_path / "claimer.toml"
    path.write_text('[stellar]\npayout_token = "CEXPLICIT"\n')

    cfg = load_config(path)

    assert cfg.payout_token == "CEXPLICIT"
    assert cfg.delegation_registry == "CTESTREG"
