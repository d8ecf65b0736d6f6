# Rev 0.2.0
# pmdash – generic table repository
from __future__ import annotations
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

log = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A store operation failed (driver error, constraint, or missing row)."""


class NotFoundError(RepositoryError):
    """The addressed row does not exist."""


class SQLiteTableRepository:
    """
    list/get/insert/update/delete over one table, snake_case rows as dicts.
    Subclasses set `table` and `columns` (writable columns, without id/created_at).
    """

    table: str = ""
    columns: Sequence[str] = ()
    order_by: str = "created_at ASC, id ASC"
    # set while a transaction() spanning this repository is open
    _deferred: bool = False

    def __init__(self, db_or_conn):
        self._db = db_or_conn

    # ---------- public API ----------

    def list(self, **filters: Any) -> List[Dict[str, Any]]:
        where, params = self._where(filters)
        sql = f"SELECT * FROM {self.table}{where} ORDER BY {self.order_by}"
        return self._fetch_all(sql, params)

    def get(self, row_id: int) -> Optional[Dict[str, Any]]:
        rows = self._fetch_all(f"SELECT * FROM {self.table} WHERE id = ?", (row_id,))
        return rows[0] if rows else None

    def insert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = self._writable(fields)
        cols = ", ".join(data)
        marks = ", ".join("?" for _ in data)
        cur = self._execute(
            f"INSERT INTO {self.table}({cols}, created_at) VALUES ({marks}, datetime('now'))",
            tuple(data.values()),
        )
        row = self.get(int(cur.lastrowid))
        if row is None:
            raise RepositoryError(f"{self.table}: inserted row vanished")
        return row

    def update(self, row_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = self._writable(fields)
        if data:
            sets = ", ".join(f"{c} = ?" for c in data)
            cur = self._execute(
                f"UPDATE {self.table} SET {sets} WHERE id = ?",
                (*data.values(), row_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError(f"{self.table}: no row with id {row_id}")
        row = self.get(row_id)
        if row is None:
            raise NotFoundError(f"{self.table}: no row with id {row_id}")
        return row

    def delete(self, row_id: int) -> None:
        cur = self._execute(f"DELETE FROM {self.table} WHERE id = ?", (row_id,))
        if cur.rowcount == 0:
            raise NotFoundError(f"{self.table}: no row with id {row_id}")

    @contextmanager
    def transaction(self, *others: "SQLiteTableRepository") -> Iterator[sqlite3.Connection]:
        """
        One BEGIN/COMMIT around every statement run through this repository
        and `others` (which must share the connection). Any exception rolls back.
        """
        con = self._conn()
        repos = (self, *others)
        try:
            if con.in_transaction:
                con.commit()
            con.execute("BEGIN")
        except sqlite3.Error as exc:
            raise RepositoryError(str(exc)) from exc
        for r in repos:
            r._deferred = True
        try:
            yield con
            con.execute("COMMIT")
        except sqlite3.Error as exc:
            if con.in_transaction:
                con.execute("ROLLBACK")
            log.error("%s: transaction rolled back: %s", self.table, exc)
            raise RepositoryError(str(exc)) from exc
        except BaseException:
            if con.in_transaction:
                con.execute("ROLLBACK")
            raise
        finally:
            for r in repos:
                r._deferred = False

    # ---------- internals ----------

    def _conn(self) -> sqlite3.Connection:
        # Either a raw sqlite3.Connection or a wrapper exposing .conn
        if isinstance(self._db, sqlite3.Connection):
            return self._db
        if hasattr(self._db, "conn") and isinstance(self._db.conn, sqlite3.Connection):
            return self._db.conn
        raise RuntimeError(
            f"{type(self).__name__}: could not obtain sqlite3.Connection from db wrapper (.conn)."
        )

    def _writable(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return {c: fields[c] for c in self.columns if c in fields}

    def _where(self, filters: Dict[str, Any]) -> tuple[str, tuple]:
        unknown = set(filters) - set(self.columns) - {"id"}
        if unknown:
            raise RepositoryError(f"{self.table}: cannot filter on {sorted(unknown)}")
        if not filters:
            return "", ()
        clause = " AND ".join(f"{k} = ?" for k in filters)
        return f" WHERE {clause}", tuple(filters.values())

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            cur = self._conn().execute(sql, params)
            if not self._deferred:
                self._conn().commit()
            return cur
        except sqlite3.Error as exc:
            log.error("%s: %s failed: %s", self.table, sql.split()[0], exc)
            raise RepositoryError(str(exc)) from exc

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        try:
            cur = self._conn().execute(sql, params)
        except sqlite3.Error as exc:
            log.error("%s: query failed: %s", self.table, exc)
            raise RepositoryError(str(exc)) from exc
        cols = [d[0] for d in cur.description]
        return [{cols[i]: row[i] for i in range(len(cols))} for row in cur.fetchall()]
