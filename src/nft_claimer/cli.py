"""CLI entry point for the nft_claimer service."""

from __future__ import annotations

import asyncio
import logging
import sys
from decimal import Decimal, InvalidOperation

import click
from stellar_sdk import Keypair

from nft_claimer.claimer import NETWORK_PASSPHRASES, NFTClaimer
from nft_claimer.claims.custody import TokenCustody
from nft_claimer.config import load_config
from nft_claimer.errors import ClaimerError
from nft_claimer.stellar.token import SorobanPayoutToken
from nft_claimer.storage.sqlite import SQLiteClaimStore

# ~29 days at 5s ledgers
DEFAULT_APPROVAL_LEDGERS = 500_000


def _units(amount: int, decimals: int) -> str:
    return f"{Decimal(amount) / (Decimal(10) ** decimals):f}"


def _require_secret(cfg) -> Keypair:
    """Exit with error if no acting wallet secret is configured."""
    if not cfg.secret:
        click.echo("Error: No wallet secret configured.", err=True)
        click.echo("Set NFT_CLAIMER_SECRET.", err=True)
        sys.exit(1)
    return Keypair.from_secret(cfg.secret)


def _require_contracts(cfg) -> None:
    """Exit with error if the owner or contract IDs are missing."""
    missing = [
        name for name, value in (
            ("owner", cfg.owner),
            ("payout_token", cfg.payout_token),
            ("delegation_registry", cfg.delegation_registry),
        ) if not value
    ]
    if missing:
        click.echo(f"Error: Missing configuration: {', '.join(missing)}", err=True)
        click.echo("Set them in the config file, env vars, or deployments.json.", err=True)
        sys.exit(1)


def _passphrase(cfg) -> str:
    return cfg.network_passphrase or NETWORK_PASSPHRASES.get(cfg.network, "")


def _fail(exc: ClaimerError) -> None:
    click.echo(f"Error [{exc.code}]: {exc}", err=True)
    if exc.retryable:
        click.echo("This condition may clear; retry later.", err=True)
    sys.exit(1)


def _parse_amount(value: str, raw: bool = False, param_hint: str = "--amount") -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"{value!r} is not a number", param_hint=param_hint)
    if not amount.is_finite():
        raise click.BadParameter("must be a finite number", param_hint=param_hint)
    if amount < 0:
        raise click.BadParameter("must not be negative", param_hint=param_hint)
    if raw and amount != amount.to_integral_value():
        raise click.BadParameter(
            "base units must be a whole number", param_hint=param_hint,
        )
    return amount


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """nft-claimer - per-NFT token claims with delegation-aware payout."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show claimer configuration."""
    cfg = load_config(ctx.obj["config_path"])
    click.echo(f"Owner:        {cfg.owner or '(not set)'}")
    click.echo(f"Network:      {cfg.network}")
    click.echo(f"RPC URL:      {cfg.rpc_url}")
    click.echo(f"Payout token: {cfg.payout_token or '(not set)'}")
    click.echo(f"Delegations:  {cfg.delegation_registry or '(not set)'}")
    click.echo(f"Custody:      {cfg.custody_address or '(not set)'}")
    click.echo(f"DB path:      {cfg.db_path}")
    click.echo(f"Secret:       {'***configured***' if cfg.secret else '(not set)'}")
    click.echo(f"Custody key:  {'***configured***' if cfg.custody_secret else '(not set)'}")


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Query payout token decimals, owner balance, and custody allowance."""
    cfg = load_config(ctx.obj["config_path"])
    _require_contracts(cfg)
    if not cfg.custody_address:
        click.echo("Error: No custody address configured.", err=True)
        sys.exit(1)

    async def _info():
        token = SorobanPayoutToken(
            cfg.payout_token, cfg.rpc_url, _passphrase(cfg), spender=cfg.custody_address,
        )
        try:
            decimals = await token.decimals()
            balance = await token.balance(cfg.owner)
            allowance = await token.allowance(cfg.owner, cfg.custody_address)
            click.echo(f"Owner:      {cfg.owner}")
            click.echo(f"Custody:    {cfg.custody_address}")
            click.echo(f"Decimals:   {decimals}")
            click.echo(f"Balance:    {balance} ({_units(balance, decimals)})")
            click.echo(f"Allowance:  {allowance} ({_units(allowance, decimals)})")
            if allowance > balance:
                click.echo("\nWarning: allowance exceeds the owner's balance.", err=True)
        except ClaimerError as exc:
            _fail(exc)
        finally:
            await token.close()

    asyncio.run(_info())


# ── Owner actions ──────────────────────────────────────


@cli.command()
@click.argument("amount")
@click.option("--raw", is_flag=True, help="AMOUNT is in base units, not whole tokens")
@click.option("--ledgers", type=int, default=DEFAULT_APPROVAL_LEDGERS,
              help="Ledgers until the allowance expires")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def approve(ctx: click.Context, amount: str, raw: bool, ledgers: int, yes: bool) -> None:
    """Approve the custody spender to pull payouts from the owner.

    Claims are paid from this allowance at claim time; nothing is escrowed.
    """
    cfg = load_config(ctx.obj["config_path"])
    _require_contracts(cfg)
    keypair = _require_secret(cfg)
    if not cfg.custody_address:
        click.echo("Error: No custody address configured.", err=True)
        sys.exit(1)
    if keypair.public_key != cfg.owner:
        click.echo("Warning: the configured secret is not the claimer owner.", err=True)

    whole = _parse_amount(amount, raw, param_hint="AMOUNT")

    async def _approve():
        token = SorobanPayoutToken(
            cfg.payout_token, cfg.rpc_url, _passphrase(cfg),
            spender=cfg.custody_address, approver=keypair,
        )
        try:
            custody = TokenCustody(token, cfg.owner, cfg.custody_address)
            decimals = await custody.decimals()
            base = int(whole) if raw else await custody.to_base_units(whole)
            expiration = await token.latest_ledger() + ledgers

            click.echo(f"Approving {base} ({_units(base, decimals)}) for {cfg.custody_address}")
            click.echo(f"  Expires at ledger {expiration}")
            if not yes:
                click.confirm("\nProceed?", abort=True)

            tx_hash = await token.approve(base, expiration)
            click.echo("Approval submitted.")
            click.echo(f"  Tx hash: {tx_hash or '?'}")
        except ClaimerError as exc:
            _fail(exc)
        except click.Abort:
            raise
        except Exception as exc:
            click.echo(f"\nApproval failed: {exc}", err=True)
            sys.exit(1)
        finally:
            await token.close()

    asyncio.run(_approve())


@cli.command("add-claims")
@click.argument("collection")
@click.argument("token_ids", nargs=-1, type=int, required=True)
@click.option("--amount", required=True, help="Amount per token (whole tokens unless --raw)")
@click.option("--raw", is_flag=True, help="--amount is in base units")
@click.pass_context
def add_claims(
    ctx: click.Context, collection: str, token_ids: tuple[int, ...], amount: str, raw: bool,
) -> None:
    """Register a claimable amount for each TOKEN_ID of COLLECTION."""
    cfg = load_config(ctx.obj["config_path"])
    _require_contracts(cfg)
    keypair = _require_secret(cfg)
    whole = _parse_amount(amount, raw)

    async def _add():
        try:
            async with NFTClaimer.from_config(cfg) as claimer:
                per_token = int(whole) if raw else await claimer.custody.to_base_units(whole)
                result = await claimer.add_claims(
                    keypair.public_key, collection, list(token_ids), per_token,
                )
                click.echo(f"Registered {len(result.token_ids)} tokens on {collection}")
                click.echo(f"  Per token: {result.amount_per_token}")
                click.echo(f"  Total:     {result.total}")

                # Registration is committed; a failed check is only reported
                try:
                    allowance = await claimer.custody.allowance()
                except ClaimerError as exc:
                    click.echo(f"\nWarning: could not check the allowance: {exc}", err=True)
                    return
                outstanding = sum(e.amount_owed for e in await claimer.entries(claimed=False))
                if allowance < outstanding:
                    click.echo(
                        f"\nNote: allowance {allowance} is below outstanding {outstanding};"
                        " some claims will fail until you approve more.",
                        err=True,
                    )
        except ClaimerError as exc:
            _fail(exc)

    asyncio.run(_add())


# ── Claiming ───────────────────────────────────────────


@cli.command()
@click.argument("collection")
@click.argument("token_ids", nargs=-1, type=int, required=True)
@click.pass_context
def claim(ctx: click.Context, collection: str, token_ids: tuple[int, ...]) -> None:
    """Claim everything owed on TOKEN_IDs of COLLECTION to your wallet."""
    cfg = load_config(ctx.obj["config_path"])
    _require_contracts(cfg)
    keypair = _require_secret(cfg)
    if not cfg.custody_secret:
        click.echo("Error: No custody secret configured; payouts can't be signed.", err=True)
        click.echo("Set NFT_CLAIMER_CUSTODY_SECRET.", err=True)
        sys.exit(1)

    async def _claim():
        try:
            async with NFTClaimer.from_config(cfg) as claimer:
                receipt = await claimer.claim(keypair.public_key, collection, list(token_ids))
                click.echo(f"Claimed {len(receipt.token_ids)} tokens on {collection}")
                click.echo(f"  Paid:    {receipt.amount}")
                click.echo(f"  To:      {receipt.claimant}")
                click.echo(f"  Tx hash: {receipt.tx_hash or '?'}")
        except ClaimerError as exc:
            _fail(exc)

    asyncio.run(_claim())


# ── Ledger ─────────────────────────────────────────────


@cli.command()
@click.argument("collection")
@click.argument("token_id", type=int)
@click.pass_context
def lookup(ctx: click.Context, collection: str, token_id: int) -> None:
    """Show the claim entry for one token."""
    cfg = load_config(ctx.obj["config_path"])

    async def _lookup():
        store = SQLiteClaimStore(cfg.db_path)
        await store.initialize()
        try:
            entry = await store.get_entry(collection, token_id)
            if entry is None:
                click.echo("Not registered.")
                return
            click.echo(f"Token:      {entry.token_id}")
            click.echo(f"Collection: {entry.collection}")
            click.echo(f"Owed:       {entry.amount_owed}")
            click.echo(f"Claimed:    {entry.claimed}")
            if entry.claimed:
                click.echo(f"  By:       {entry.claimed_by}")
                click.echo(f"  At:       {entry.claimed_at}")
        finally:
            await store.close()

    asyncio.run(_lookup())


@cli.command("list")
@click.option("--collection", default=None, help="Only this collection")
@click.option("--unclaimed", is_flag=True, help="Only entries not yet claimed")
@click.pass_context
def list_entries(ctx: click.Context, collection: str | None, unclaimed: bool) -> None:
    """List registered claim entries."""
    cfg = load_config(ctx.obj["config_path"])

    async def _list():
        store = SQLiteClaimStore(cfg.db_path)
        await store.initialize()
        try:
            entries = await store.list_entries(collection, False if unclaimed else None)
            if not entries:
                click.echo("No claim entries.")
                return
            for e in entries:
                state = "claimed" if e.claimed else "open"
                click.echo(f"  [{state:7s}] {e.collection[:12]}... #{e.token_id} owed={e.amount_owed}")
        finally:
            await store.close()

    asyncio.run(_list())


@cli.command()
@click.option("-n", "--limit", type=int, default=20, help="Number of recent entries to show")
@click.pass_context
def activity(ctx: click.Context, limit: int) -> None:
    """Show recent claimer activity."""
    cfg = load_config(ctx.obj["config_path"])

    async def _activity():
        store = SQLiteClaimStore(cfg.db_path)
        await store.initialize()
        try:
            records = await store.get_recent_activity(limit)
            if not records:
                click.echo("No activity recorded.")
                return
            for a in records:
                click.echo(f"  {a.created_at} {a.event_type:16s} {a.message}")
        finally:
            await store.close()

    asyncio.run(_activity())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
