"""Problem selection.

A ProblemSource yields the candidate problems for a set of filters; the
selector then draws one uniformly at random. Three sources compose:

- RemoteProblemSource: queries the problems table
- FixedPoolProblemSource: filters a built-in pool by category
- FallbackProblemSource: tries a primary source, falls back on error or empty

The fixed pool filters by category only. Difficulty bands are not applied
in fallback mode, so a "7-10" request can yield an easier demo problem.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import structlog

from mathsolve.core.demo_data import DEMO_PROBLEMS
from mathsolve.core.models import Category, Problem
from mathsolve.store.base import Filter, RecordStore, StoreError, eq, gte, lte

logger = structlog.get_logger(__name__)

ALL = "ALL"


class ProblemSelectionError(Exception):
    """Raised when no problem matches the filters."""


class DifficultyBand(str, Enum):
    ALL = "ALL"
    EASY = "1-3"
    MEDIUM = "4-6"
    HARD = "7-10"

    @property
    def bounds(self) -> tuple[int, int] | None:
        """Inclusive difficulty range, or None when unrestricted."""
        if self is DifficultyBand.ALL:
            return None
        low, high = self.value.split("-")
        return int(low), int(high)


@dataclass(frozen=True)
class ProblemFilters:
    """Category (or ALL) and difficulty band of the requested problem."""

    category: Category | None = None
    difficulty: DifficultyBand = DifficultyBand.ALL

    @classmethod
    def parse(cls, category: str | None = None, difficulty: str | None = None) -> ProblemFilters:
        """Build filters from raw query values.

        Raises:
            ValueError: On an unknown category or band
        """
        parsed_category = None
        if category and category.strip().upper() != ALL:
            parsed_category = Category.parse(category)
        band = DifficultyBand(difficulty.strip().upper()) if difficulty else DifficultyBand.ALL
        return cls(category=parsed_category, difficulty=band)


class ProblemSource(ABC):
    """Yields candidate problems for a set of filters."""

    name: str = "source"

    @abstractmethod
    async def candidates(self, filters: ProblemFilters) -> list[Problem]:
        """Return every problem matching filters."""


class RemoteProblemSource(ProblemSource):
    """Problems read from the record store."""

    name = "remote"

    def __init__(self, store: RecordStore):
        self.store = store

    async def candidates(self, filters: ProblemFilters) -> list[Problem]:
        query: list[Filter] = []
        if filters.category is not None:
            query.append(eq("category", filters.category.value))
        bounds = filters.difficulty.bounds
        if bounds is not None:
            query.extend([gte("difficulty", bounds[0]), lte("difficulty", bounds[1])])

        rows = await self.store.select("problems", query)
        return [Problem.from_record(row) for row in rows]


class FixedPoolProblemSource(ProblemSource):
    """Problems drawn from a fixed in-memory pool, filtered by category."""

    name = "fixed_pool"

    def __init__(self, pool: tuple[Problem, ...] | list[Problem] = DEMO_PROBLEMS):
        self.pool = tuple(pool)

    async def candidates(self, filters: ProblemFilters) -> list[Problem]:
        if filters.category is None:
            return list(self.pool)
        return [p for p in self.pool if p.category is filters.category]


class FallbackProblemSource(ProblemSource):
    """Use primary; on StoreError or an empty result use fallback instead."""

    name = "fallback"

    def __init__(self, primary: ProblemSource, fallback: ProblemSource):
        self.primary = primary
        self.fallback = fallback

    async def candidates(self, filters: ProblemFilters) -> list[Problem]:
        try:
            problems = await self.primary.candidates(filters)
        except (StoreError, KeyError, ValueError) as e:
            logger.warning(
                "problems.fallback_used",
                reason="error",
                source=self.primary.name,
                error=str(e),
            )
            return await self.fallback.candidates(filters)

        if not problems:
            logger.info("problems.fallback_used", reason="empty", source=self.primary.name)
            return await self.fallback.candidates(filters)

        return problems


def default_source(store: RecordStore) -> ProblemSource:
    """Remote problems with the built-in demo pool as fallback."""
    return FallbackProblemSource(RemoteProblemSource(store), FixedPoolProblemSource())


async def select_problem(
    source: ProblemSource,
    filters: ProblemFilters | None = None,
    rng: random.Random | None = None,
) -> Problem:
    """Draw one problem uniformly from the source's candidates.

    Args:
        source: Where candidates come from
        filters: Category and difficulty band (default: unrestricted)
        rng: Random generator (default: module-level random)

    Returns:
        The selected Problem

    Raises:
        ProblemSelectionError: If the source yields no candidates
    """
    filters = filters or ProblemFilters()
    problems = await source.candidates(filters)
    if not problems:
        raise ProblemSelectionError(
            f"No problems for category={filters.category.value if filters.category else ALL}"
            f" difficulty={filters.difficulty.value}"
        )

    problem = (rng or random).choice(problems)
    logger.debug(
        "problems.selected",
        problem_id=problem.id,
        candidates=len(problems),
        source=source.name,
    )
    return problem
