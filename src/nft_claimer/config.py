"""Configuration loading: TOML file + environment variables + deployments.json."""

from __future__ import annotations

import json
import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from stellar_sdk import Keypair

from nft_claimer.claimer import NETWORK_PASSPHRASES
from nft_claimer.models.config import ClaimerConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "NFT_CLAIMER_",
) -> ClaimerConfig:
    """Load claimer configuration from TOML file, env vars, and deployments.json.

    Priority (highest wins):
        1. Environment variables (NFT_CLAIMER_SECRET, etc.)
        2. TOML config file
        3. deployments.json entry for the selected network
        4. Defaults from ClaimerConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ClaimerConfig()

    # ── Claimer section ────────────────────────────────────
    claimer = raw.get("claimer", {})
    if v := claimer.get("owner"):
        cfg.owner = str(v)
    if v := claimer.get("log_level"):
        cfg.log_level = str(v)

    # ── Stellar section ────────────────────────────────────
    stellar = raw.get("stellar", {})
    if v := stellar.get("network"):
        cfg.network = str(v)
    if v := stellar.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := stellar.get("network_passphrase"):
        cfg.network_passphrase = str(v)
    if v := stellar.get("payout_token"):
        cfg.payout_token = str(v)
    if v := stellar.get("delegation_registry"):
        cfg.delegation_registry = str(v)
    if v := stellar.get("custody_address"):
        cfg.custody_address = str(v)

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        cfg.db_path = str(v)

    # ── Environment variable overrides (highest priority) ──
    if secret := os.environ.get(f"{env_prefix}SECRET"):
        cfg.secret = secret
    if secret := os.environ.get(f"{env_prefix}CUSTODY_SECRET"):
        cfg.custody_secret = secret
    if owner := os.environ.get(f"{env_prefix}OWNER"):
        cfg.owner = owner
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = net
    if rpc := os.environ.get(f"{env_prefix}RPC_URL"):
        cfg.rpc_url = rpc
    if token := os.environ.get(f"{env_prefix}PAYOUT_TOKEN"):
        cfg.payout_token = token
    if registry := os.environ.get(f"{env_prefix}DELEGATION_REGISTRY"):
        cfg.delegation_registry = registry
    if db := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db

    if not stellar.get("network_passphrase") and cfg.network in NETWORK_PASSPHRASES:
        cfg.network_passphrase = NETWORK_PASSPHRASES[cfg.network]

    # Fill contract IDs for the network from deployments.json if not explicitly set
    deployments_path = stellar.get("deployments_path", "deployments.json")
    if not cfg.payout_token or not cfg.delegation_registry:
        _load_deployments(cfg, deployments_path)

    if cfg.custody_secret and not cfg.custody_address:
        cfg.custody_address = Keypair.from_secret(cfg.custody_secret).public_key

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg


def _load_deployments(cfg: ClaimerConfig, deployments_path: str) -> None:
    """Load contract IDs for cfg.network from a deployments.json file.

    Expected shape: {"testnet": {"payout_token": "C...", "delegation_registry": "C..."}}
    """
    p = Path(deployments_path).expanduser()
    if not p.is_absolute():
        # Try relative to CWD
        p = Path.cwd() / p
    if not p.exists():
        return

    with open(p) as f:
        data = json.load(f)

    network = data.get(cfg.network, {})
    if not cfg.payout_token and (cid := network.get("payout_token")):
        cfg.payout_token = cid
    if not cfg.delegation_registry and (cid := network.get("delegation_registry")):
        cfg.delegation_registry = cid
