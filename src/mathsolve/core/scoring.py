"""Scoring of correct answers.

A correct answer earns 100 points, or 75 if the solution was revealed
first. For a signed-in user on a stored (non-demo) problem the result is
persisted in four sequential steps:

1. insert the submission
2. raise the profile's total_score by the points
3. re-read the profile
4. save the vault entry (notes and scratchpad)

The steps are not atomic as a group. A failure after step 1 leaves the
earlier steps in place; it is logged as ``scoring.partial_failure`` and the
StoreError propagates. There is no retry or compensation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from mathsolve.core.accounts import refresh_profile
from mathsolve.core.models import (
    Problem,
    SessionContext,
    Submission,
    SubmissionStatus,
    VaultEntry,
)
from mathsolve.core.vault import save_vault
from mathsolve.store.base import RecordStore, StoreError, eq

logger = structlog.get_logger(__name__)

POINTS_INDEPENDENT = 100
POINTS_WITH_SOLUTION = 75


def points_for(solution_was_revealed: bool) -> int:
    """Points for a correct answer."""
    return POINTS_WITH_SOLUTION if solution_was_revealed else POINTS_INDEPENDENT


def status_for(solution_was_revealed: bool) -> SubmissionStatus:
    if solution_was_revealed:
        return SubmissionStatus.SOLVED_WITH_SOLUTION
    return SubmissionStatus.SOLVED_INDEPENDENTLY


@dataclass(frozen=True)
class ScoringResult:
    """Outcome of scoring one correct answer."""

    points: int
    status: SubmissionStatus
    context: SessionContext
    submission: Submission | None = None

    @property
    def persisted(self) -> bool:
        return self.submission is not None


async def record_correct_submission(
    store: RecordStore,
    context: SessionContext,
    problem: Problem,
    solution_was_revealed: bool,
    vault_entry: VaultEntry | None = None,
) -> ScoringResult:
    """Score a correct answer and persist it when possible.

    Args:
        store: Record store
        context: Current session (anonymous sessions are scored, not stored)
        problem: The solved problem (demo problems are scored, not stored)
        solution_was_revealed: Whether the solution was shown before solving
        vault_entry: Notes/scratchpad to save as the last step

    Returns:
        ScoringResult carrying the refreshed SessionContext

    Raises:
        StoreError: If any persistence step fails
    """
    points = points_for(solution_was_revealed)
    status = status_for(solution_was_revealed)

    if not context.is_signed_in or problem.is_demo:
        return ScoringResult(points=points, status=status, context=context)

    submission = Submission(
        user_id=context.user_id,
        problem_id=problem.id,
        status=status,
        points_earned=points,
        submitted_at=datetime.now(timezone.utc).isoformat(),
    )
    await store.insert("submissions", submission.to_record())
    logger.info(
        "scoring.submission_recorded",
        user_id=context.user_id,
        problem_id=problem.id,
        status=status.value,
        points=points,
    )

    step = "score_update"
    try:
        await store.update(
            "profiles",
            [eq("user_id", context.user_id)],
            {"total_score": context.total_score + points},
        )
        step = "profile_refresh"
        refreshed = await refresh_profile(store, context)
        if vault_entry is not None:
            step = "vault_save"
            await save_vault(store, vault_entry)
    except StoreError as e:
        logger.error(
            "scoring.partial_failure",
            user_id=context.user_id,
            problem_id=problem.id,
            failed_step=step,
            error=str(e),
        )
        raise

    return ScoringResult(
        points=points, status=status, context=refreshed, submission=submission
    )
