"""Database schema for Wealth Tracker.

SQLite is the default engine (a single database file). Postgres is supported as well.

Timestamps are ISO-8601 TEXT (UTC, with 'Z'). ISO strings sort lexicographically in
time order, so `ORDER BY created_at DESC` returns the newest rows first.

Transactions cite asset types, platforms and accounts by *name*. There are no foreign
keys: a transaction may cite a name that was never created or was deleted later.

NOTE: The Postgres schema is generated from the SQLite schema with a small set of
transformations (types + autoincrement).
"""

from __future__ import annotations

import re


# Columns added after the first release. Older databases get them via ALTER TABLE.
TRANSACTION_LATE_COLUMNS = (
    ("platform", "TEXT"),
    ("account", "TEXT"),
)


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Reference lists (names are unique, rows are never updated in place)
CREATE TABLE IF NOT EXISTS asset_types (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS platforms (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- Transactions
-- units / amount are signed; nav is the price per unit at transaction time.
CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    scheme_name TEXT NOT NULL,
    asset_type TEXT NOT NULL,
    transaction_type TEXT NOT NULL, -- Buy|Sell|Dividend (not enforced)
    units REAL NOT NULL,
    nav REAL NOT NULL,
    amount REAL NOT NULL,
    date TEXT NOT NULL,
    platform TEXT,
    account TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_transactions_created_at ON transactions (created_at);
"""

# Shape of the very first release, before platform/account existed.
# Only used to exercise the upgrade path.
LEGACY_TRANSACTIONS_SQLITE = r"""
CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    scheme_name TEXT NOT NULL,
    asset_type TEXT NOT NULL,
    transaction_type TEXT NOT NULL,
    units REAL NOT NULL,
    nav REAL NOT NULL,
    amount REAL NOT NULL,
    date TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


def _sqlite_to_postgres(ddl: str) -> str:
    # Remove SQLite pragmas
    lines: list[str] = []
    for line in ddl.splitlines():
        if line.strip().upper().startswith("PRAGMA "):
            continue
        lines.append(line)
    out = "\n".join(lines)

    # Types
    out = re.sub(r"\bREAL\b", "DOUBLE PRECISION", out)

    # AUTOINCREMENT primary keys
    out = re.sub(
        r"INTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT",
        "BIGSERIAL PRIMARY KEY",
        out,
        flags=re.IGNORECASE,
    )
    out = re.sub(r"\bAUTOINCREMENT\b", "", out, flags=re.IGNORECASE)

    return out


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    d = (dialect or "").lower()
    if d.startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE
