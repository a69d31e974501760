"""Pydantic schemas for Web API.

Serialization models for accounts, problems, solve sessions, the
scratchpad, leaderboard and history.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from mathsolve.core.leaderboard import HistoryItem, LeaderboardEntry
from mathsolve.core.models import Problem, Profile
from mathsolve.core.ranking import RANK_COLORS, difficulty_label, rank_of


# =============================================================================
# ACCOUNT SCHEMAS
# =============================================================================


class SignUpRequest(BaseModel):
    """Request body for creating an account."""

    email: str = Field(default="", max_length=200)
    password: str = Field(default="", max_length=200)
    username: str = Field(default="", max_length=100)


class SignInRequest(BaseModel):
    """Request body for signing in."""

    email: str = Field(default="", max_length=200)
    password: str = Field(default="", max_length=200)


class SessionPayload(BaseModel):
    """Client-held session. Send user_id back as the X-User-Id header."""

    user_id: str
    email: str
    username: str


class ProfileResponse(BaseModel):
    """Response for a profile."""

    user_id: str
    email: str
    username: str
    total_score: int
    elo_rating: int
    rank: str
    rank_color: str

    @classmethod
    def from_profile(cls, profile: Profile) -> ProfileResponse:
        rank = rank_of(profile.total_score)
        return cls(
            user_id=profile.user_id,
            email=profile.email,
            username=profile.username,
            total_score=profile.total_score,
            elo_rating=profile.elo_rating,
            rank=rank.value,
            rank_color=RANK_COLORS[rank],
        )


class AuthResponse(BaseModel):
    """Response for sign-up and sign-in."""

    session: SessionPayload
    profile: ProfileResponse | None = None


# =============================================================================
# PROBLEM SCHEMAS
# =============================================================================


class ProblemResponse(BaseModel):
    """A problem without its solution or final answer."""

    id: str
    category: str
    difficulty: int
    difficulty_label: str
    difficulty_color: str
    statement_latex: str
    question_text: str
    source: str | None = None
    is_demo: bool = False

    @classmethod
    def from_problem(cls, problem: Problem) -> ProblemResponse:
        label, color = difficulty_label(problem.difficulty)
        return cls(
            id=problem.id,
            category=problem.category.value,
            difficulty=problem.difficulty,
            difficulty_label=label,
            difficulty_color=color,
            statement_latex=problem.statement_latex,
            question_text=problem.question_text,
            source=problem.source,
            is_demo=problem.is_demo,
        )


# =============================================================================
# SOLVE SESSION SCHEMAS
# =============================================================================


class SolveStartRequest(BaseModel):
    """Request to start solving a random problem."""

    category: str = "ALL"
    difficulty: str = "ALL"


class SolveSessionResponse(BaseModel):
    """State of a solve session."""

    session_id: str
    problem: ProblemResponse
    status: str | None = None  # None | correct | correct_with_solution | wrong
    solution_visible: bool = False
    solution_latex: str | None = None
    points_earned: int | None = None
    notes: str = ""
    scratchpad_data: str | None = None
    created_at: str


class AnswerRequest(BaseModel):
    """Answer submitted for the session's problem."""

    answer: str = Field(default="", max_length=500)


class AnswerResponse(BaseModel):
    """Result of an answer submission."""

    correct: bool
    points_earned: int | None = None
    persisted: bool = False
    profile: ProfileResponse | None = None
    session: SolveSessionResponse


class NotesRequest(BaseModel):
    notes: str = Field(default="", max_length=20000)


class VaultSaveResponse(BaseModel):
    saved: bool


# =============================================================================
# SCRATCHPAD SCHEMAS
# =============================================================================


class ScratchpadEventsRequest(BaseModel):
    """Batch of input events, in order.

    Each event has a ``type`` (begin, extend, end, clear, tool or a
    mouse/pointer/touch event name) plus ``clientX``/``clientY``,
    ``touches`` or ``tool`` as needed. ``left``/``top`` give the surface's
    bounding box in client coordinates.
    """

    events: list[dict[str, Any]] = Field(default_factory=list, max_length=5000)
    left: float = 0.0
    top: float = 0.0


class ScratchpadResponse(BaseModel):
    state: str  # idle | drawing
    tool: str
    blank: bool
    snapshot: str | None = None


# =============================================================================
# LEADERBOARD / HISTORY SCHEMAS
# =============================================================================


class LeaderboardEntryResponse(BaseModel):
    position: int
    username: str
    total_score: int
    elo_rating: int
    rank: str
    rank_color: str

    @classmethod
    def from_entry(cls, entry: LeaderboardEntry) -> LeaderboardEntryResponse:
        return cls(
            position=entry.position,
            username=entry.username,
            total_score=entry.total_score,
            elo_rating=entry.elo_rating,
            rank=entry.rank.value,
            rank_color=RANK_COLORS[entry.rank],
        )


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntryResponse]
    count: int


class HistoryItemResponse(BaseModel):
    problem_id: str
    status: str
    points_earned: int
    submitted_at: str
    category: str | None = None
    difficulty: int | None = None
    question_text: str | None = None
    source: str | None = None

    @classmethod
    def from_item(cls, item: HistoryItem) -> HistoryItemResponse:
        return cls(**item.to_dict())


class HistoryResponse(BaseModel):
    items: list[HistoryItemResponse]
    count: int


class RankResponse(BaseModel):
    score: int
    rank: str
    color: str


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
