"""Leaderboard and submission history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from mathsolve.core.demo_data import DEMO_LEADERS
from mathsolve.core.models import SessionContext, Submission
from mathsolve.core.ranking import Rank, rank_of
from mathsolve.store.base import RecordStore, StoreError, eq, in_

logger = structlog.get_logger(__name__)

LEADERBOARD_LIMIT = 50
HISTORY_LIMIT = 50


@dataclass(frozen=True)
class LeaderboardEntry:
    position: int
    username: str
    total_score: int
    elo_rating: int

    @property
    def rank(self) -> Rank:
        return rank_of(self.total_score)


@dataclass(frozen=True)
class HistoryItem:
    """A submission joined with the problem it was made on."""

    submission: Submission
    category: str | None = None
    difficulty: int | None = None
    question_text: str | None = None
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "problem_id": self.submission.problem_id,
            "status": self.submission.status.value,
            "points_earned": self.submission.points_earned,
            "submitted_at": self.submission.submitted_at,
            "category": self.category,
            "difficulty": self.difficulty,
            "question_text": self.question_text,
            "source": self.source,
        }


def _demo_leaderboard() -> list[LeaderboardEntry]:
    return [
        LeaderboardEntry(position=i, username=name, total_score=score, elo_rating=elo)
        for i, (name, score, elo) in enumerate(DEMO_LEADERS, start=1)
    ]


async def fetch_leaderboard(
    store: RecordStore, limit: int = LEADERBOARD_LIMIT
) -> list[LeaderboardEntry]:
    """Top profiles by total score; the demo board if the store fails or is empty."""
    try:
        rows = await store.select(
            "profiles",
            columns=["username", "total_score", "elo_rating"],
            order_by="total_score",
            descending=True,
            limit=limit,
        )
    except StoreError as e:
        logger.warning("leaderboard.fallback_used", reason="error", error=str(e))
        return _demo_leaderboard()

    if not rows:
        logger.info("leaderboard.fallback_used", reason="empty")
        return _demo_leaderboard()

    return [
        LeaderboardEntry(
            position=i,
            username=row.get("username") or "",
            total_score=int(row.get("total_score") or 0),
            elo_rating=int(row.get("elo_rating") or 0),
        )
        for i, row in enumerate(rows, start=1)
    ]


async def fetch_history(
    store: RecordStore, context: SessionContext, limit: int = HISTORY_LIMIT
) -> list[HistoryItem]:
    """The user's latest submissions, newest first.

    Raises:
        ValueError: If the session is anonymous
        StoreError: If the store fails
    """
    if not context.is_signed_in:
        raise ValueError("History requires a signed-in session")

    rows = await store.select(
        "submissions",
        [eq("user_id", context.user_id)],
        order_by="submitted_at",
        descending=True,
        limit=limit,
    )
    submissions = [Submission.from_record(row) for row in rows]
    if not submissions:
        return []

    problem_ids = sorted({s.problem_id for s in submissions})
    problem_rows = await store.select(
        "problems",
        [in_("id", problem_ids)],
        columns=["id", "category", "difficulty", "question_text", "source"],
    )
    problems = {str(row["id"]): row for row in problem_rows}

    items = []
    for submission in submissions:
        problem = problems.get(submission.problem_id, {})
        items.append(
            HistoryItem(
                submission=submission,
                category=problem.get("category"),
                difficulty=problem.get("difficulty"),
                question_text=problem.get("question_text"),
                source=problem.get("source"),
            )
        )
    return items
