"""Storage service for the CRUD surface.

`PortfolioStore` is built once when the API starts and handed to every request
handler. Each call opens its own short-lived connection, so handlers running on
different threads never share a connection.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Mapping, Optional, Sequence

from wealth_tracker.config import DEFAULT_ASSET_TYPES
from wealth_tracker.db import connect, detect_dialect, init_db, insert_returning_id
from wealth_tracker.models import REFERENCE_KINDS, TRANSACTION_FIELDS, TransactionFilters
from wealth_tracker.util.time import utcnow_iso


def _debug(msg: str) -> None:
    print(f"[store] {msg}")


class StorageError(RuntimeError):
    """Any failure reported by the database driver."""


class DuplicateNameError(StorageError):
    """A reference name collided with the table's UNIQUE constraint."""


def _integrity_error_types() -> tuple[type[BaseException], ...]:
    types: list[type[BaseException]] = [sqlite3.IntegrityError]
    try:
        import psycopg2

        types.append(psycopg2.IntegrityError)
    except Exception:
        pass
    return tuple(types)


def _driver_error_types() -> tuple[type[BaseException], ...]:
    types: list[type[BaseException]] = [sqlite3.Error]
    try:
        import psycopg2

        types.append(psycopg2.Error)
    except Exception:
        pass
    return tuple(types)


_INTEGRITY_ERRORS = _integrity_error_types()
_DRIVER_ERRORS = _driver_error_types()


def _table_for(kind: str) -> str:
    try:
        return REFERENCE_KINDS[kind]
    except KeyError:
        raise ValueError(f"unknown reference kind: {kind}") from None


# INTEGER PRIMARY KEY is a signed 64-bit value on both engines.
_MIN_ROW_ID = -(2**63)
_MAX_ROW_ID = 2**63 - 1


def row_id(value: Any) -> Optional[int]:
    """Parse a row id from a path segment.

    Returns None for anything no row can have (non-integers, out of 64-bit range);
    callers treat that as "no such row".
    """
    if isinstance(value, bool):
        return None
    try:
        i = int(value)
    except (TypeError, ValueError):
        return None
    if i < _MIN_ROW_ID or i > _MAX_ROW_ID:
        return None
    return i


def _nullable(v: Any) -> Any:
    # Empty strings are stored as NULL for the optional tags.
    return v if v else None


def _transaction_params(fields: Mapping[str, Any]) -> List[Any]:
    return [
        fields.get("scheme_name"),
        fields.get("asset_type"),
        fields.get("transaction_type"),
        fields.get("units"),
        fields.get("nav"),
        fields.get("amount"),
        fields.get("date"),
        _nullable(fields.get("platform")),
        _nullable(fields.get("account")),
    ]


def missing_transaction_fields(fields: Mapping[str, Any]) -> List[str]:
    """Required fields absent from a new transaction.

    Text fields must be non-empty. units/nav/amount only need to be present:
    0 is a valid value, None is not.
    """
    missing: List[str] = []
    for key in ("scheme_name", "asset_type", "transaction_type", "date"):
        if not fields.get(key):
            missing.append(key)
    for key in ("units", "nav", "amount"):
        if fields.get(key) is None:
            missing.append(key)
    return missing


class PortfolioStore:
    def __init__(self, db_dsn: str, *, seed_asset_types: Sequence[str] = DEFAULT_ASSET_TYPES):
        self.db_dsn = db_dsn
        self.dialect = detect_dialect(db_dsn)
        self.seed_asset_types = tuple(seed_asset_types)

    def init(self) -> None:
        init_db(self.db_dsn, self.seed_asset_types)

    def _run(self, fn, *args: Any) -> Any:
        try:
            with connect(self.db_dsn) as conn:
                return fn(conn, *args)
        except _DRIVER_ERRORS as e:
            _debug(f"storage error: {e}")
            raise StorageError(str(e)) from e

    # -----------------------------
    # Reference lists
    # -----------------------------

    def list_names(self, kind: str) -> List[Dict[str, Any]]:
        table = _table_for(kind)

        def q(conn: Any) -> List[Dict[str, Any]]:
            rows = conn.execute(f"SELECT id, name FROM {table} ORDER BY name").fetchall()
            return [{"id": int(r["id"]), "name": r["name"]} for r in rows]

        return self._run(q)

    def create_name(self, kind: str, name: str) -> Dict[str, Any]:
        table = _table_for(kind)

        def q(conn: Any) -> Dict[str, Any]:
            new_id = insert_returning_id(
                conn,
                f"INSERT INTO {table} (name, created_at) VALUES (?, ?)",
                (name, utcnow_iso()),
            )
            return {"id": new_id, "name": name}

        try:
            return self._run(q)
        except StorageError as e:
            if isinstance(e.__cause__, _INTEGRITY_ERRORS):
                raise DuplicateNameError(str(e)) from e.__cause__
            raise

    def delete_name(self, kind: str, ref_id: int | str) -> None:
        """Delete by id. A missing or malformed id is not an error."""
        table = _table_for(kind)
        rid = row_id(ref_id)
        if rid is None:
            return
        self._run(lambda conn: conn.execute(f"DELETE FROM {table} WHERE id=?", (rid,)))

    # -----------------------------
    # Transactions
    # -----------------------------

    def list_transactions(self, filters: Optional[TransactionFilters] = None) -> List[Dict[str, Any]]:
        active = (filters or TransactionFilters()).active()
        sql = "SELECT * FROM transactions"
        params: List[Any] = []
        if active:
            sql += " WHERE " + " AND ".join(f"{col}=?" for col, _ in active)
            params.extend(v for _, v in active)
        # Rows inserted within the same second share created_at; id keeps them newest-first.
        sql += " ORDER BY created_at DESC, id DESC"

        def q(conn: Any) -> List[Dict[str, Any]]:
            return [dict(r) for r in conn.execute(sql, tuple(params)).fetchall()]

        return self._run(q)

    def get_transaction(self, tx_id: int | str) -> Optional[Dict[str, Any]]:
        rid = row_id(tx_id)
        if rid is None:
            return None

        def q(conn: Any) -> Optional[Dict[str, Any]]:
            row = conn.execute("SELECT * FROM transactions WHERE id=?", (rid,)).fetchone()
            return dict(row) if row is not None else None

        return self._run(q)

    def create_transaction(self, fields: Mapping[str, Any]) -> int:
        cols = ", ".join(TRANSACTION_FIELDS)

        def q(conn: Any) -> int:
            return insert_returning_id(
                conn,
                f"INSERT INTO transactions ({cols}, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (*_transaction_params(fields), utcnow_iso()),
            )

        return self._run(q)

    def update_transaction(self, tx_id: int | str, fields: Mapping[str, Any]) -> bool:
        """Overwrite every client-owned column. Returns False when no row has this id."""
        rid = row_id(tx_id)
        if rid is None:
            return False
        sets = ", ".join(f"{c}=?" for c in TRANSACTION_FIELDS)

        def q(conn: Any) -> int:
            cur = conn.execute(
                f"UPDATE transactions SET {sets} WHERE id=?",
                (*_transaction_params(fields), rid),
            )
            return int(cur.rowcount or 0)

        return self._run(q) > 0

    def delete_transaction(self, tx_id: int | str) -> bool:
        rid = row_id(tx_id)
        if rid is None:
            return False

        def q(conn: Any) -> int:
            cur = conn.execute("DELETE FROM transactions WHERE id=?", (rid,))
            return int(cur.rowcount or 0)

        return self._run(q) > 0

    def scheme_names(self) -> List[str]:
        def q(conn: Any) -> List[str]:
            rows = conn.execute(
                "SELECT DISTINCT scheme_name FROM transactions ORDER BY scheme_name"
            ).fetchall()
            return [str(r["scheme_name"]) for r in rows]

        return self._run(q)
