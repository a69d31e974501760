"""Solve session management for Web API.

A solve session holds what the solve page shows for one problem: the
problem, whether the solution was revealed, the answer status, the notes
and the scratchpad. Sessions live in memory only; everything worth
keeping goes to the record store through scoring and the vault.
"""

from __future__ import annotations

import asyncio
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from mathsolve.config.app_config import ScratchpadConfig, load_app_config
from mathsolve.core.answer_checker import (
    AnswerValidationError,
    is_correct,
    validate_answer,
)
from mathsolve.core.models import Problem, SessionContext, VaultEntry
from mathsolve.core.problem_selection import (
    ProblemFilters,
    default_source,
    select_problem,
)
from mathsolve.core.scoring import ScoringResult, record_correct_submission
from mathsolve.core.scratchpad import (
    Bounds,
    Scratchpad,
    ScratchpadError,
    apply_event,
)
from mathsolve.core.vault import load_vault, save_vault
from mathsolve.store.base import RecordStore, StoreError

logger = structlog.get_logger(__name__)

STATUS_CORRECT = "correct"
STATUS_CORRECT_WITH_SOLUTION = "correct_with_solution"
STATUS_WRONG = "wrong"


class SolveStateError(Exception):
    """Operation not allowed in the session's current state."""


@dataclass
class SolveSession:
    """An active solve session."""

    session_id: str
    problem: Problem
    filters: ProblemFilters
    user_id: str | None = None
    status: str | None = None  # None | correct | correct_with_solution | wrong
    solution_visible: bool = False
    points_earned: int | None = None
    notes: str = ""
    scratchpad_data: str | None = None
    scratchpad: Scratchpad | None = None
    created_at: str = ""

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()

    @property
    def solved(self) -> bool:
        return self.status in (STATUS_CORRECT, STATUS_CORRECT_WITH_SOLUTION)

    def vault_entry(self) -> VaultEntry | None:
        """Notes and snapshot to save, if this session may use the vault."""
        if self.user_id is None or self.problem.is_demo:
            return None
        return VaultEntry(
            user_id=self.user_id,
            problem_id=self.problem.id,
            notes=self.notes,
            scratchpad_data=self.scratchpad_data,
        )


class SessionManager:
    """Manages active solve sessions."""

    def __init__(
        self,
        scratchpad_config: ScratchpadConfig | None = None,
        rng: random.Random | None = None,
    ):
        self._sessions: dict[str, SolveSession] = {}
        self._lock = asyncio.Lock()
        self.scratchpad_config = scratchpad_config or ScratchpadConfig()
        self.rng = rng

    def _new_scratchpad(self, session: SolveSession, saved: str | None = None) -> Scratchpad:
        cfg = self.scratchpad_config

        def on_snapshot(snapshot: str | None) -> None:
            session.scratchpad_data = snapshot

        pad = Scratchpad(
            cfg.width,
            cfg.height,
            background=cfg.background,
            pen_color=cfg.pen_color,
            pen_width=cfg.pen_width,
            eraser_width=cfg.eraser_width,
            on_snapshot=on_snapshot,
        )
        if saved:
            try:
                pad.load_snapshot(saved)
            except ScratchpadError as e:
                logger.warning(
                    "solve.snapshot_unreadable",
                    session_id=session.session_id,
                    error=str(e),
                )
                session.scratchpad_data = None
        return pad

    async def _load_problem(
        self,
        store: RecordStore,
        context: SessionContext,
        session: SolveSession,
        problem: Problem,
    ) -> None:
        """Point the session at problem with fresh state and vault contents."""
        session.problem = problem
        session.user_id = context.user_id
        session.status = None
        session.solution_visible = False
        session.points_earned = None
        session.notes = ""
        session.scratchpad_data = None

        entry = None
        if context.is_signed_in and not problem.is_demo:
            try:
                entry = await load_vault(store, context, problem.id)
            except StoreError as e:
                logger.warning(
                    "solve.vault_load_failed",
                    session_id=session.session_id,
                    problem_id=problem.id,
                    error=str(e),
                )

        if entry is not None:
            session.notes = entry.notes
            session.scratchpad_data = entry.scratchpad_data
        session.scratchpad = self._new_scratchpad(session, session.scratchpad_data)

    async def create_session(
        self,
        store: RecordStore,
        context: SessionContext,
        filters: ProblemFilters | None = None,
    ) -> SolveSession:
        """Select a random problem and open a session on it.

        Raises:
            ProblemSelectionError: If no problem matches the filters
        """
        filters = filters or ProblemFilters()
        problem = await select_problem(default_source(store), filters, self.rng)

        session = SolveSession(
            session_id=str(uuid.uuid4())[:8],
            problem=problem,
            filters=filters,
        )
        await self._load_problem(store, context, session, problem)

        async with self._lock:
            self._sessions[session.session_id] = session

        logger.info(
            "solve.session_created",
            session_id=session.session_id,
            problem_id=problem.id,
            user_id=context.user_id,
        )
        return session

    async def get_session(self, session_id: str) -> SolveSession | None:
        """Get a session by ID."""
        async with self._lock:
            return self._sessions.get(session_id)

    async def _require(self, session_id: str) -> SolveSession:
        session = await self.get_session(session_id)
        if session is None:
            raise KeyError(session_id)
        return session

    async def end_session(self, session_id: str) -> bool:
        """Drop a session. Returns False if it was not found."""
        async with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            return False

        logger.info("solve.session_ended", session_id=session_id)
        return True

    async def next_problem(
        self,
        store: RecordStore,
        session_id: str,
        context: SessionContext,
        filters: ProblemFilters | None = None,
    ) -> SolveSession:
        """Replace the session's problem with a new random draw.

        Raises:
            KeyError: If the session does not exist
            ProblemSelectionError: If no problem matches the filters
        """
        session = await self._require(session_id)
        if filters is not None:
            session.filters = filters
        problem = await select_problem(default_source(store), session.filters, self.rng)
        await self._load_problem(store, context, session, problem)
        logger.info("solve.next_problem", session_id=session_id, problem_id=problem.id)
        return session

    async def reveal_solution(self, session_id: str) -> SolveSession:
        """Show the solution; a later correct answer earns reduced points.

        Raises:
            KeyError: If the session does not exist
        """
        session = await self._require(session_id)
        session.solution_visible = True
        logger.info("solve.solution_revealed", session_id=session_id)
        return session

    async def submit_answer(
        self,
        store: RecordStore,
        session_id: str,
        context: SessionContext,
        answer: str,
    ) -> tuple[SolveSession, ScoringResult | None]:
        """Check an answer and score it if correct.

        Returns:
            The session and the ScoringResult (None for a wrong answer)

        Raises:
            KeyError: If the session does not exist
            AnswerValidationError: If the answer is empty
            SolveStateError: If the problem was already solved
            StoreError: If persisting a correct answer fails part-way
        """
        session = await self._require(session_id)
        validate_answer(answer)
        if session.solved:
            raise SolveStateError("Problem already solved; request the next problem")

        if not is_correct(answer, session.problem.final_answer):
            session.status = STATUS_WRONG
            logger.info("solve.answer_wrong", session_id=session_id)
            return session, None

        revealed = session.solution_visible
        session.status = STATUS_CORRECT_WITH_SOLUTION if revealed else STATUS_CORRECT
        session.user_id = context.user_id

        problem = session.problem
        vault_entry = session.vault_entry()
        result = await record_correct_submission(
            store,
            context,
            problem,
            solution_was_revealed=revealed,
            vault_entry=vault_entry,
        )
        # next_problem may have replaced the problem while scoring was awaited
        if session.problem is problem:
            session.points_earned = result.points

        logger.info(
            "solve.answer_correct",
            session_id=session_id,
            points=result.points,
            persisted=result.persisted,
        )
        return session, result

    async def update_notes(self, session_id: str, notes: str) -> SolveSession:
        session = await self._require(session_id)
        session.notes = notes
        return session

    async def save_vault(
        self, store: RecordStore, session_id: str, context: SessionContext
    ) -> bool:
        """Save notes and scratchpad. Returns False for anonymous or demo sessions.

        Raises:
            KeyError: If the session does not exist
            StoreError: If the store rejects the entry
        """
        session = await self._require(session_id)
        session.user_id = context.user_id
        entry = session.vault_entry()
        if entry is None:
            return False
        await save_vault(store, entry)
        return True

    async def apply_scratchpad_events(
        self,
        session_id: str,
        events: list[dict[str, Any]],
        bounds: Bounds = Bounds(),
    ) -> SolveSession:
        """Feed input events to the session's scratchpad in order.

        Raises:
            KeyError: If the session does not exist
            ScratchpadError: On a malformed event (earlier events stay applied)
        """
        session = await self._require(session_id)
        if session.scratchpad is None:
            session.scratchpad = self._new_scratchpad(session, session.scratchpad_data)
        for event in events:
            apply_event(session.scratchpad, event, bounds)
        return session

    async def list_sessions(self) -> list[SolveSession]:
        """List all active sessions."""
        async with self._lock:
            return list(self._sessions.values())

    async def get_session_count(self) -> int:
        """Get count of active sessions."""
        async with self._lock:
            return len(self._sessions)


# Global session manager instance
_session_manager: SessionManager | None = None


def get_session_manager() -> SessionManager:
    """Get the global session manager instance."""
    global _session_manager
    if _session_manager is None:
        _session_manager = SessionManager(load_app_config().scratchpad)
    return _session_manager


def reset_session_manager() -> None:
    """Reset the session manager (for testing)."""
    global _session_manager
    _session_manager = None


__all__ = [
    "AnswerValidationError",
    "SessionManager",
    "SolveSession",
    "SolveStateError",
    "get_session_manager",
    "reset_session_manager",
]
