"""Domain records.

Problem, Submission, Profile and VaultEntry mirror the rows of the record
store; SessionContext is the signed-in identity threaded through calls.
All records are immutable: an update produces a new value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

DEMO_ID_PREFIX = "demo"


class Category(str, Enum):
    """Problem categories as stored in the problems table."""

    CALCULUS = "CALCULUS"
    NUMBER_THEORY = "NUMBER THEORY"
    COMBINATORICS = "COMBINATORICS"
    PROBABILITY = "PROBABILITY"
    GEOMETRY = "GEOMETRY"

    @classmethod
    def parse(cls, value: str) -> Category:
        """Accept either the stored value or the member name.

        Raises:
            ValueError: If value names no category
        """
        normalized = value.strip().upper()
        for member in cls:
            if normalized in (member.value, member.name):
                return member
        raise ValueError(f"Unknown category: {value}")


class SubmissionStatus(str, Enum):
    SOLVED_INDEPENDENTLY = "SOLVED_INDEPENDENTLY"
    SOLVED_WITH_SOLUTION = "SOLVED_WITH_SOLUTION"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Problem:
    """A practice problem."""

    id: str
    category: Category
    difficulty: int
    statement_latex: str
    question_text: str
    solution_latex: str
    final_answer: str
    source: str | None = None

    @property
    def is_demo(self) -> bool:
        """Demo problems come from the built-in pool and are never persisted."""
        return self.id.startswith(DEMO_ID_PREFIX)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Problem:
        return cls(
            id=str(record["id"]),
            category=Category.parse(record["category"]),
            difficulty=int(record["difficulty"]),
            statement_latex=record.get("statement_latex") or "",
            question_text=record.get("question_text") or "",
            solution_latex=record.get("solution_latex") or "",
            final_answer=record.get("final_answer") or "",
            source=record.get("source"),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "category": self.category.value,
            "difficulty": self.difficulty,
            "statement_latex": self.statement_latex,
            "question_text": self.question_text,
            "solution_latex": self.solution_latex,
            "final_answer": self.final_answer,
        }


@dataclass(frozen=True)
class Submission:
    """One recorded attempt on a problem."""

    user_id: str
    problem_id: str
    status: SubmissionStatus
    points_earned: int
    submitted_at: str

    def to_record(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "problem_id": self.problem_id,
            "status": self.status.value,
            "points_earned": self.points_earned,
            "submitted_at": self.submitted_at,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Submission:
        return cls(
            user_id=record["user_id"],
            problem_id=str(record["problem_id"]),
            status=SubmissionStatus(record["status"]),
            points_earned=int(record.get("points_earned") or 0),
            submitted_at=record.get("submitted_at") or "",
        )


@dataclass(frozen=True)
class Profile:
    """Account profile with cumulative score."""

    user_id: str
    email: str
    username: str
    total_score: int = 0
    elo_rating: int = 1000

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Profile:
        return cls(
            user_id=record["user_id"],
            email=record.get("email") or "",
            username=record.get("username") or "",
            total_score=int(record.get("total_score") or 0),
            elo_rating=int(record.get("elo_rating") or 1000),
        )


@dataclass(frozen=True)
class VaultEntry:
    """Saved notes and scratchpad snapshot for one (user, problem) pair."""

    user_id: str
    problem_id: str
    notes: str = ""
    scratchpad_data: str | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "problem_id": self.problem_id,
            "notes": self.notes,
            "scratchpad_data": self.scratchpad_data,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> VaultEntry:
        return cls(
            user_id=record["user_id"],
            problem_id=str(record["problem_id"]),
            notes=record.get("notes") or "",
            scratchpad_data=record.get("scratchpad_data") or None,
        )


@dataclass(frozen=True)
class SessionContext:
    """Who is calling, plus the last profile state confirmed by the store.

    The user_id is a capability held by the client, not a security
    boundary. Refreshing returns a new context rather than mutating this one.
    """

    user_id: str | None = None
    email: str | None = None
    username: str | None = None
    profile: Profile | None = field(default=None, compare=False)

    @classmethod
    def anonymous(cls) -> SessionContext:
        return cls()

    @classmethod
    def for_profile(cls, profile: Profile) -> SessionContext:
        return cls(
            user_id=profile.user_id,
            email=profile.email,
            username=profile.username,
            profile=profile,
        )

    @property
    def is_signed_in(self) -> bool:
        return self.user_id is not None

    @property
    def total_score(self) -> int:
        return self.profile.total_score if self.profile else 0

    def with_profile(self, profile: Profile | None) -> SessionContext:
        return replace(self, profile=profile)
