"""SQLite record store.

Local stand-in for the hosted backend. Connection handling and schema
creation follow the usual pattern: one short-lived connection per
operation, committed on success and rolled back on error.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

from mathsolve.store.base import (
    Filter,
    Record,
    RecordStore,
    StoreError,
    check_columns,
)

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/mathsolve.db")

_SQL_OPS = {"eq": "=", "gte": ">=", "lte": "<="}


class SqliteRecordStore(RecordStore):
    """Record store backed by a SQLite file."""

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    def init_db(self) -> None:
        """Create the database file and all tables if they don't exist."""
        with self._connect() as conn:
            _create_schema(conn)

        logger.info("store.initialized", path=str(self.db_path))

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection as context manager.

        Yields:
            SQLite connection with row factory set to sqlite3.Row
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row

        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _execute(
        self, table: str, sql: str, params: list
    ) -> tuple[list[sqlite3.Row], int]:
        """Run one statement. Returns the fetched rows and the rowcount."""
        try:
            with self._connect() as conn:
                cursor = conn.execute(sql, params)
                return cursor.fetchall(), cursor.rowcount
        except sqlite3.Error as e:
            logger.warning("store.query_failed", table=table, error=str(e))
            raise StoreError(str(e), table=table) from e

    async def select(
        self,
        table: str,
        filters: list[Filter] | tuple[Filter, ...] = (),
        *,
        columns: list[str] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        check_columns(table, [f.column for f in filters] + list(columns or []))
        if order_by:
            check_columns(table, [order_by])

        projection = ", ".join(columns) if columns else "*"
        where, params = _where_clause(filters)
        sql = f"SELECT {projection} FROM {table}{where}"
        if order_by:
            sql += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        rows, _ = self._execute(table, sql, params)
        return [dict(row) for row in rows]

    async def insert(self, table: str, record: Record) -> None:
        check_columns(table, list(record))
        cols = ", ".join(record)
        marks = ", ".join("?" for _ in record)
        self._execute(
            table,
            f"INSERT INTO {table} ({cols}) VALUES ({marks})",
            list(record.values()),
        )
        logger.debug("store.inserted", table=table)

    async def update(
        self,
        table: str,
        filters: list[Filter] | tuple[Filter, ...],
        values: Record,
    ) -> int:
        check_columns(table, list(values) + [f.column for f in filters])
        if not values:
            return 0

        assignments = ", ".join(f"{col} = ?" for col in values)
        where, params = _where_clause(filters)
        _, rowcount = self._execute(
            table,
            f"UPDATE {table} SET {assignments}{where}",
            list(values.values()) + params,
        )
        logger.debug("store.updated", table=table, rows=rowcount)
        return rowcount

    async def upsert(
        self,
        table: str,
        record: Record,
        on_conflict: tuple[str, ...],
    ) -> None:
        check_columns(table, list(record) + list(on_conflict))
        missing = [c for c in on_conflict if c not in record]
        if missing:
            raise StoreError(
                f"Upsert record lacks conflict column(s): {', '.join(missing)}",
                table=table,
            )

        cols = ", ".join(record)
        marks = ", ".join("?" for _ in record)
        updates = [c for c in record if c not in on_conflict]
        if updates:
            action = "DO UPDATE SET " + ", ".join(
                f"{c} = excluded.{c}" for c in updates
            )
        else:
            action = "DO NOTHING"

        self._execute(
            table,
            f"INSERT INTO {table} ({cols}) VALUES ({marks}) "
            f"ON CONFLICT ({', '.join(on_conflict)}) {action}",
            list(record.values()),
        )
        logger.debug("store.upserted", table=table)


def _where_clause(filters: list[Filter] | tuple[Filter, ...]) -> tuple[str, list]:
    """Build a WHERE clause and its parameters from filters."""
    if not filters:
        return "", []

    clauses = []
    params: list = []
    for f in filters:
        if f.op == "in":
            values = list(f.value)
            if not values:
                clauses.append("0")
                continue
            clauses.append(f"{f.column} IN ({', '.join('?' for _ in values)})")
            params.extend(values)
        elif f.op == "eq" and f.value is None:
            clauses.append(f"{f.column} IS NULL")
        else:
            clauses.append(f"{f.column} {_SQL_OPS[f.op]} ?")
            params.append(f.value)

    return " WHERE " + " AND ".join(clauses), params


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS profiles (
            user_id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            username TEXT NOT NULL,
            password_hash TEXT,
            salt TEXT,
            total_score INTEGER NOT NULL DEFAULT 0 CHECK(total_score >= 0),
            elo_rating INTEGER NOT NULL DEFAULT 1000
        );

        CREATE TABLE IF NOT EXISTS problems (
            id TEXT PRIMARY KEY,
            source TEXT,
            category TEXT NOT NULL,
            difficulty INTEGER NOT NULL CHECK(difficulty BETWEEN 1 AND 10),
            statement_latex TEXT NOT NULL,
            question_text TEXT NOT NULL,
            solution_latex TEXT NOT NULL,
            final_answer TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS submissions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            problem_id TEXT NOT NULL,
            status TEXT NOT NULL CHECK(status IN ('SOLVED_INDEPENDENTLY', 'SOLVED_WITH_SOLUTION', 'FAILED')),
            points_earned INTEGER NOT NULL DEFAULT 0 CHECK(points_earned >= 0),
            submitted_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
        );

        CREATE TABLE IF NOT EXISTS vault (
            user_id TEXT NOT NULL,
            problem_id TEXT NOT NULL,
            notes TEXT NOT NULL DEFAULT '',
            scratchpad_data TEXT,
            PRIMARY KEY (user_id, problem_id)
        );

        CREATE INDEX IF NOT EXISTS idx_problems_category ON problems(category);
        CREATE INDEX IF NOT EXISTS idx_problems_difficulty ON problems(difficulty);
        CREATE INDEX IF NOT EXISTS idx_submissions_user ON submissions(user_id, submitted_at);
        CREATE INDEX IF NOT EXISTS idx_profiles_score ON profiles(total_score);
        """
    )
