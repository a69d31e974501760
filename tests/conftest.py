"""Shared fixtures: isolated stores and a store that always fails."""

import asyncio
from typing import Any

import pytest

from mathsolve.config.app_config import clear_config_cache
from mathsolve.core.models import Category, Problem
from mathsolve.store.base import Filter, RecordStore, StoreError
from mathsolve.store.sqlite_store import SqliteRecordStore
from mathsolve.web.sessions import reset_session_manager

# Low PBKDF2 cost keeps account tests fast
TEST_ITERATIONS = 1000


class FailingStore(RecordStore):
    """Record store whose every operation raises StoreError."""

    def __init__(self):
        self.calls: list[str] = []

    async def select(self, table, filters=(), *, columns=None, order_by=None, descending=False, limit=None):
        self.calls.append(f"select:{table}")
        raise StoreError("backend unreachable", table=table)

    async def insert(self, table, record):
        self.calls.append(f"insert:{table}")
        raise StoreError("backend unreachable", table=table)

    async def update(self, table, filters, values):
        self.calls.append(f"update:{table}")
        raise StoreError("backend unreachable", table=table)

    async def upsert(self, table, record, on_conflict):
        self.calls.append(f"upsert:{table}")
        raise StoreError("backend unreachable", table=table)


class FlakyStore(RecordStore):
    """Delegates to an inner store, failing the listed operations.

    Operations are named "<op>:<table>", e.g. "update:profiles".
    """

    def __init__(self, inner: RecordStore, fail: set[str]):
        self.inner = inner
        self.fail = fail
        self.calls: list[str] = []

    def _check(self, op: str, table: str) -> None:
        name = f"{op}:{table}"
        self.calls.append(name)
        if name in self.fail:
            raise StoreError(f"{name} failed", table=table)

    async def select(self, table, filters=(), *, columns=None, order_by=None, descending=False, limit=None):
        self._check("select", table)
        return await self.inner.select(
            table, filters, columns=columns, order_by=order_by, descending=descending, limit=limit
        )

    async def insert(self, table, record):
        self._check("insert", table)
        await self.inner.insert(table, record)

    async def update(self, table, filters: list[Filter], values: dict[str, Any]):
        self._check("update", table)
        return await self.inner.update(table, filters, values)

    async def upsert(self, table, record, on_conflict):
        self._check("upsert", table)
        await self.inner.upsert(table, record, on_conflict)


@pytest.fixture(autouse=True)
def _isolated_state():
    """Fresh config cache and session manager for every test."""
    clear_config_cache()
    reset_session_manager()
    yield
    clear_config_cache()
    reset_session_manager()


@pytest.fixture
def store(tmp_path) -> SqliteRecordStore:
    """Empty SQLite store in a temp directory."""
    s = SqliteRecordStore(tmp_path / "db" / "test.db")
    s.init_db()
    return s


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def sample_problems() -> list[Problem]:
    """Stored (non-demo) problems across categories and difficulties."""
    return [
        Problem(
            id="p-calc-2",
            category=Category.CALCULUS,
            difficulty=2,
            statement_latex=r"\frac{d}{dx} x^2",
            question_text="Differentiate x squared.",
            solution_latex="2x",
            final_answer="2x",
            source="Textbook",
        ),
        Problem(
            id="p-nt-5",
            category=Category.NUMBER_THEORY,
            difficulty=5,
            statement_latex=r"7^{2022} \bmod 100",
            question_text="Find the last two digits of 7^2022.",
            solution_latex="49",
            final_answer="49",
            source="AMC 2022",
        ),
        Problem(
            id="p-prob-5",
            category=Category.PROBABILITY,
            difficulty=5,
            statement_latex=r"P(\text{prime sum})",
            question_text="Probability the sum of two dice is prime.",
            solution_latex="15/36 = 5/12",
            final_answer="5/12",
        ),
        Problem(
            id="p-geo-8",
            category=Category.GEOMETRY,
            difficulty=8,
            statement_latex=r"r = ?",
            question_text="Inradius of the 9-40-41 triangle.",
            solution_latex="(9+40-41)/2 = 4",
            final_answer="4",
            source="AIME 2021 I",
        ),
    ]


@pytest.fixture
def seeded_store(store, sample_problems) -> SqliteRecordStore:
    """SQLite store holding sample_problems."""

    async def _seed():
        for problem in sample_problems:
            await store.insert("problems", problem.to_record())

    asyncio.run(_seed())
    return store


@pytest.fixture
def make_flaky_store():
    """Factory wrapping a store so the named operations fail."""

    def _make(inner: RecordStore, *fail: str) -> FlakyStore:
        return FlakyStore(inner, set(fail))

    return _make


@pytest.fixture
def test_iterations() -> int:
    return TEST_ITERATIONS
