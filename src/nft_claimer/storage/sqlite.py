"""SQLite implementation of the ClaimStore protocol."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from nft_claimer.models.claims import ClaimEntry, ClaimReceipt
from nft_claimer.models.records import ActivityRecord, DeploymentRecord

log = logging.getLogger(__name__)

SCHEMA = """
-- Identities fixed at construction
CREATE TABLE IF NOT EXISTS deployment (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    owner TEXT NOT NULL,
    payout_token TEXT NOT NULL,
    delegation_registry TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Claim ledger, one row per (collection, token)
CREATE TABLE IF NOT EXISTS claim_entries (
    collection TEXT NOT NULL,
    token_id INTEGER NOT NULL,
    amount_owed INTEGER NOT NULL,
    claimed INTEGER NOT NULL DEFAULT 0,
    registered_at TEXT NOT NULL,
    claimed_at TEXT,
    claimed_by TEXT,
    PRIMARY KEY (collection, token_id)
);
CREATE INDEX IF NOT EXISTS idx_entries_claimed ON claim_entries(claimed);

-- Completed claims
CREATE TABLE IF NOT EXISTS claim_receipts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    collection TEXT NOT NULL,
    token_ids TEXT NOT NULL,
    claimant TEXT NOT NULL,
    amount INTEGER NOT NULL,
    tx_hash TEXT,
    claimed_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_receipts_claimant ON claim_receipts(claimant);

-- Activity log
CREATE TABLE IF NOT EXISTS activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_type TEXT NOT NULL,
    collection TEXT,
    token_ids TEXT,
    amount INTEGER,
    actor TEXT,
    message TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_activity_created ON activity_log(created_at);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteClaimStore:
    """SQLite-backed implementation of the ClaimStore protocol.

    The connection runs in autocommit mode; ``transaction()`` opens an
    explicit ``BEGIN IMMEDIATE`` so multi-statement writes land together.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None
        self._tx_depth = 0

    async def initialize(self) -> None:
        if self._db is not None:
            return
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path, isolation_level=None)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    @property
    def in_transaction(self) -> bool:
        return self._tx_depth > 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        # Nested use joins the outer transaction
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield
            finally:
                self._tx_depth -= 1
            return

        await self.db.execute("BEGIN IMMEDIATE")
        self._tx_depth = 1
        try:
            yield
        except BaseException:
            self._tx_depth = 0
            await self.db.execute("ROLLBACK")
            log.debug("Transaction rolled back")
            raise
        else:
            self._tx_depth = 0
            await self.db.execute("COMMIT")

    # ── Deployment ─────────────────────────────────────────

    async def get_deployment(self) -> DeploymentRecord | None:
        async with self.db.execute("SELECT * FROM deployment WHERE id=1") as cur:
            row = await cur.fetchone()
            if row is None:
                return None
            return DeploymentRecord(
                owner=row["owner"],
                payout_token=row["payout_token"],
                delegation_registry=row["delegation_registry"],
                created_at=row["created_at"],
            )

    async def save_deployment(self, record: DeploymentRecord) -> None:
        await self.db.execute(
            "INSERT INTO deployment (id, owner, payout_token, delegation_registry, created_at)"
            " VALUES (1, ?, ?, ?, ?)",
            (record.owner, record.payout_token, record.delegation_registry,
             record.created_at or _now()),
        )

    # ── Claim entries ──────────────────────────────────────

    async def upsert_entries(
        self, collection: str, token_ids: list[int], amount: int,
    ) -> None:
        now = _now()
        await self.db.executemany(
            "INSERT INTO claim_entries (collection, token_id, amount_owed, claimed, registered_at)"
            " VALUES (?, ?, ?, 0, ?)"
            " ON CONFLICT(collection, token_id) DO UPDATE SET"
            " amount_owed=excluded.amount_owed, claimed=0,"
            " registered_at=excluded.registered_at"
            " WHERE claim_entries.claimed=0",
            [(collection, token_id, amount, now) for token_id in token_ids],
        )

    async def get_entry(self, collection: str, token_id: int) -> ClaimEntry | None:
        async with self.db.execute(
            "SELECT * FROM claim_entries WHERE collection=? AND token_id=?",
            (collection, token_id),
        ) as cur:
            row = await cur.fetchone()
            return _row_to_entry(row) if row else None

    async def get_entries(
        self, collection: str, token_ids: list[int],
    ) -> dict[int, ClaimEntry]:
        if not token_ids:
            return {}
        placeholders = ",".join("?" for _ in token_ids)
        async with self.db.execute(
            f"SELECT * FROM claim_entries WHERE collection=? AND token_id IN ({placeholders})",
            (collection, *token_ids),
        ) as cur:
            return {row["token_id"]: _row_to_entry(row) async for row in cur}

    async def list_entries(
        self, collection: str | None = None, claimed: bool | None = None,
    ) -> list[ClaimEntry]:
        clauses: list[str] = []
        params: list[object] = []
        if collection is not None:
            clauses.append("collection=?")
            params.append(collection)
        if claimed is not None:
            clauses.append("claimed=?")
            params.append(int(claimed))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        async with self.db.execute(
            f"SELECT * FROM claim_entries{where} ORDER BY collection, token_id",
            params,
        ) as cur:
            return [_row_to_entry(row) async for row in cur]

    async def mark_claimed(
        self, collection: str, token_ids: list[int], claimant: str,
    ) -> list[int]:
        now = _now()
        changed: list[int] = []
        for token_id in token_ids:
            cur = await self.db.execute(
                "UPDATE claim_entries SET claimed=1, claimed_at=?, claimed_by=?"
                " WHERE collection=? AND token_id=? AND claimed=0 AND amount_owed>0",
                (now, claimant, collection, token_id),
            )
            if cur.rowcount:
                changed.append(token_id)
            await cur.close()
        return changed

    # ── Receipts ───────────────────────────────────────────

    async def save_receipt(self, receipt: ClaimReceipt) -> None:
        if not receipt.claimed_at:
            receipt.claimed_at = _now()
        cur = await self.db.execute(
            "INSERT INTO claim_receipts"
            " (collection, token_ids, claimant, amount, tx_hash, claimed_at)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            (
                receipt.collection, json.dumps(receipt.token_ids), receipt.claimant,
                receipt.amount, receipt.tx_hash, receipt.claimed_at,
            ),
        )
        receipt.id = cur.lastrowid
        await cur.close()

    async def get_receipts(self, claimant: str | None = None) -> list[ClaimReceipt]:
        if claimant is not None:
            query, params = (
                "SELECT * FROM claim_receipts WHERE claimant=? ORDER BY id", (claimant,)
            )
        else:
            query, params = "SELECT * FROM claim_receipts ORDER BY id", ()
        async with self.db.execute(query, params) as cur:
            return [
                ClaimReceipt(
                    id=row["id"],
                    collection=row["collection"],
                    token_ids=json.loads(row["token_ids"]),
                    claimant=row["claimant"],
                    amount=row["amount"],
                    tx_hash=row["tx_hash"],
                    claimed_at=row["claimed_at"],
                )
                async for row in cur
            ]

    # ── Activity log ───────────────────────────────────────

    async def log_activity(
        self,
        event_type: str,
        message: str,
        collection: str | None = None,
        token_ids: list[int] | None = None,
        amount: int | None = None,
        actor: str | None = None,
    ) -> None:
        ids = ",".join(str(t) for t in token_ids) if token_ids else None
        await self.db.execute(
            "INSERT INTO activity_log"
            " (event_type, collection, token_ids, amount, actor, message, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (event_type, collection, ids, amount, actor, message, _now()),
        )

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        async with self.db.execute(
            "SELECT * FROM activity_log ORDER BY id DESC LIMIT ?", (limit,)
        ) as cur:
            return [
                ActivityRecord(
                    id=row["id"],
                    event_type=row["event_type"],
                    collection=row["collection"],
                    token_ids=row["token_ids"],
                    amount=row["amount"],
                    actor=row["actor"],
                    message=row["message"],
                    created_at=row["created_at"],
                )
                async for row in cur
            ]


def _row_to_entry(row: aiosqlite.Row) -> ClaimEntry:
    return ClaimEntry(
        collection=row["collection"],
        token_id=row["token_id"],
        amount_owed=row["amount_owed"],
        claimed=bool(row["claimed"]),
        registered_at=row["registered_at"],
        claimed_at=row["claimed_at"],
        claimed_by=row["claimed_by"],
    )
