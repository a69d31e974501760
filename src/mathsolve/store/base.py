"""Abstract record store.

The application keeps no state of its own beyond the current request: all
accounts, problems, submissions and vault entries live in a record store
exposing four operations per table:

- select: equality/range filters, optional ordering and limit
- insert: append one record
- update: patch the records matching a filter
- upsert: insert or merge on a conflict key
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal

# Tables and the columns the application reads or writes
TABLES: dict[str, tuple[str, ...]] = {
    "profiles": (
        "user_id",
        "email",
        "username",
        "password_hash",
        "salt",
        "total_score",
        "elo_rating",
    ),
    "problems": (
        "id",
        "source",
        "category",
        "difficulty",
        "statement_latex",
        "question_text",
        "solution_latex",
        "final_answer",
    ),
    "submissions": (
        "id",
        "user_id",
        "problem_id",
        "status",
        "points_earned",
        "submitted_at",
    ),
    "vault": (
        "user_id",
        "problem_id",
        "notes",
        "scratchpad_data",
    ),
}

FilterOp = Literal["eq", "gte", "lte", "in"]

Record = dict[str, Any]


class StoreError(Exception):
    """Error raised by a record store operation."""

    def __init__(self, message: str, table: str | None = None):
        self.table = table
        super().__init__(message)


@dataclass(frozen=True)
class Filter:
    """A single column predicate."""

    column: str
    op: FilterOp
    value: Any


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def in_(column: str, values: list[Any] | tuple[Any, ...]) -> Filter:
    return Filter(column, "in", tuple(values))


def check_columns(table: str, columns: list[str] | tuple[str, ...]) -> None:
    """Reject unknown tables or columns before they reach a backend.

    Raises:
        StoreError: If the table or any column is not part of the schema
    """
    known = TABLES.get(table)
    if known is None:
        raise StoreError(f"Unknown table: {table}", table=table)
    unknown = [c for c in columns if c not in known]
    if unknown:
        raise StoreError(
            f"Unknown column(s) for {table}: {', '.join(unknown)}", table=table
        )


class RecordStore(ABC):
    """Create/read/update/query interface over the application tables."""

    @abstractmethod
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
        """Read the records matching every filter."""

    @abstractmethod
    async def insert(self, table: str, record: Record) -> None:
        """Insert one record."""

    @abstractmethod
    async def update(
        self,
        table: str,
        filters: list[Filter] | tuple[Filter, ...],
        values: Record,
    ) -> int:
        """Patch matching records with values. Returns the number updated."""

    @abstractmethod
    async def upsert(
        self,
        table: str,
        record: Record,
        on_conflict: tuple[str, ...],
    ) -> None:
        """Insert record, or merge it into the row sharing the conflict key."""

    async def select_one(
        self,
        table: str,
        filters: list[Filter] | tuple[Filter, ...],
        *,
        columns: list[str] | None = None,
    ) -> Record | None:
        """Read a single record, or None when nothing matches."""
        rows = await self.select(table, filters, columns=columns, limit=1)
        return rows[0] if rows else None
