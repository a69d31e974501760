"""Tests for scoring and persisting correct answers."""

import pytest

from mathsolve.core.accounts import sign_up
from mathsolve.core.demo_data import DEMO_PROBLEMS
from mathsolve.core.models import SessionContext, SubmissionStatus, VaultEntry
from mathsolve.core.scoring import (
    POINTS_INDEPENDENT,
    POINTS_WITH_SOLUTION,
    points_for,
    record_correct_submission,
    status_for,
)
from mathsolve.store.base import StoreError, eq


async def _new_user(store, iterations):
    return await sign_up(store, "ada@example.com", "secret", "ada", iterations=iterations)


class TestPoints:
    """Tests for the point and status rules."""

    def test_independent(self):
        assert points_for(False) == POINTS_INDEPENDENT == 100
        assert status_for(False) is SubmissionStatus.SOLVED_INDEPENDENTLY

    def test_with_solution(self):
        assert points_for(True) == POINTS_WITH_SOLUTION == 75
        assert status_for(True) is SubmissionStatus.SOLVED_WITH_SOLUTION


class TestRecordCorrectSubmission:
    """Tests for record_correct_submission."""

    @pytest.mark.asyncio
    async def test_signed_in_stored_problem(self, seeded_store, sample_problems, test_iterations):
        """Score 0 → 100 with one SOLVED_INDEPENDENTLY submission."""
        context = await _new_user(seeded_store, test_iterations)
        assert context.total_score == 0
        problem = sample_problems[0]

        result = await record_correct_submission(seeded_store, context, problem, False)

        assert result.points == 100
        assert result.persisted
        assert result.context.total_score == 100

        rows = await seeded_store.select("submissions", [eq("user_id", context.user_id)])
        assert len(rows) == 1
        assert rows[0]["problem_id"] == problem.id
        assert rows[0]["status"] == "SOLVED_INDEPENDENTLY"
        assert rows[0]["points_earned"] == 100

    @pytest.mark.asyncio
    async def test_revealed_solution_earns_75(self, seeded_store, sample_problems, test_iterations):
        context = await _new_user(seeded_store, test_iterations)

        result = await record_correct_submission(seeded_store, context, sample_problems[1], True)

        assert result.points == 75
        assert result.status is SubmissionStatus.SOLVED_WITH_SOLUTION
        assert result.context.total_score == 75
        row = await seeded_store.select_one("submissions", [eq("user_id", context.user_id)])
        assert row["status"] == "SOLVED_WITH_SOLUTION"
        assert row["points_earned"] == 75

    @pytest.mark.asyncio
    async def test_scores_accumulate(self, seeded_store, sample_problems, test_iterations):
        context = await _new_user(seeded_store, test_iterations)

        first = await record_correct_submission(seeded_store, context, sample_problems[0], False)
        second = await record_correct_submission(seeded_store, first.context, sample_problems[1], True)

        assert second.context.total_score == 175
        rows = await seeded_store.select("submissions", [eq("user_id", context.user_id)])
        assert len(rows) == 2

    @pytest.mark.asyncio
    async def test_anonymous_not_persisted(self, failing_store, sample_problems):
        """Anonymous sessions are scored but never touch the store."""
        result = await record_correct_submission(
            failing_store, SessionContext.anonymous(), sample_problems[0], False
        )
        assert result.points == 100
        assert result.persisted is False
        assert failing_store.calls == []

    @pytest.mark.asyncio
    async def test_demo_problem_not_persisted(self, store, test_iterations):
        context = await _new_user(store, test_iterations)

        result = await record_correct_submission(store, context, DEMO_PROBLEMS[0], False)

        assert result.points == 100
        assert result.persisted is False
        assert result.context.total_score == 0
        assert await store.select("submissions") == []

    @pytest.mark.asyncio
    async def test_vault_saved_last(self, seeded_store, sample_problems, test_iterations):
        context = await _new_user(seeded_store, test_iterations)
        problem = sample_problems[2]
        entry = VaultEntry(context.user_id, problem.id, notes="count pairs")

        await record_correct_submission(seeded_store, context, problem, False, vault_entry=entry)

        row = await seeded_store.select_one(
            "vault", [eq("user_id", context.user_id), eq("problem_id", problem.id)]
        )
        assert row["notes"] == "count pairs"

    @pytest.mark.asyncio
    async def test_insert_failure_propagates(self, seeded_store, sample_problems, test_iterations, make_flaky_store):
        context = await _new_user(seeded_store, test_iterations)
        flaky = make_flaky_store(seeded_store, "insert:submissions")

        with pytest.raises(StoreError):
            await record_correct_submission(flaky, context, sample_problems[0], False)

        assert flaky.calls == ["insert:submissions"]

    @pytest.mark.asyncio
    async def test_score_update_failure_keeps_submission(
        self, seeded_store, sample_problems, test_iterations, make_flaky_store
    ):
        """Steps are not atomic: the submission stays when the score update fails."""
        context = await _new_user(seeded_store, test_iterations)
        flaky = make_flaky_store(seeded_store, "update:profiles")

        with pytest.raises(StoreError):
            await record_correct_submission(flaky, context, sample_problems[0], False)

        assert len(await seeded_store.select("submissions")) == 1
        profile = await seeded_store.select_one("profiles", [eq("user_id", context.user_id)])
        assert profile["total_score"] == 0

    @pytest.mark.asyncio
    async def test_vault_failure_keeps_score(
        self, seeded_store, sample_problems, test_iterations, make_flaky_store
    ):
        context = await _new_user(seeded_store, test_iterations)
        problem = sample_problems[0]
        flaky = make_flaky_store(seeded_store, "upsert:vault")
        entry = VaultEntry(context.user_id, problem.id, notes="x")

        with pytest.raises(StoreError):
            await record_correct_submission(flaky, context, problem, False, vault_entry=entry)

        profile = await seeded_store.select_one("profiles", [eq("user_id", context.user_id)])
        assert profile["total_score"] == 100
        assert await seeded_store.select("vault") == []
