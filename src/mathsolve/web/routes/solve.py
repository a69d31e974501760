"""Solve session endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from mathsolve.core.answer_checker import AnswerValidationError
from mathsolve.core.models import SessionContext
from mathsolve.core.problem_selection import ProblemSelectionError
from mathsolve.core.scratchpad import Bounds, Drawing, ScratchpadError
from mathsolve.store.base import RecordStore, StoreError
from mathsolve.web.dependencies import get_context, get_store
from mathsolve.web.routes.problems import parse_filters
from mathsolve.web.schemas import (
    AnswerRequest,
    AnswerResponse,
    NotesRequest,
    ProblemResponse,
    ProfileResponse,
    ScratchpadEventsRequest,
    ScratchpadResponse,
    SolveSessionResponse,
    SolveStartRequest,
    VaultSaveResponse,
)
from mathsolve.web.sessions import SolveSession, SolveStateError, get_session_manager

router = APIRouter(prefix="/api/solve", tags=["solve"])


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Session '{session_id}' not found",
    )


def _session_response(session: SolveSession) -> SolveSessionResponse:
    return SolveSessionResponse(
        session_id=session.session_id,
        problem=ProblemResponse.from_problem(session.problem),
        status=session.status,
        solution_visible=session.solution_visible,
        solution_latex=session.problem.solution_latex if session.solution_visible else None,
        points_earned=session.points_earned,
        notes=session.notes,
        scratchpad_data=session.scratchpad_data,
        created_at=session.created_at,
    )


@router.post("", response_model=SolveSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_solving(
    request: SolveStartRequest,
    store: RecordStore = Depends(get_store),
    context: SessionContext = Depends(get_context),
) -> SolveSessionResponse:
    """Open a solve session on a random problem."""
    filters = parse_filters(request.category, request.difficulty)
    try:
        session = await get_session_manager().create_session(store, context, filters)
    except ProblemSelectionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _session_response(session)


@router.get("/{session_id}", response_model=SolveSessionResponse)
async def get_solve_session(session_id: str) -> SolveSessionResponse:
    """Get session state."""
    session = await get_session_manager().get_session(session_id)
    if session is None:
        raise _not_found(session_id)
    return _session_response(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_solve_session(session_id: str) -> None:
    """End a solve session."""
    if not await get_session_manager().end_session(session_id):
        raise _not_found(session_id)


@router.post("/{session_id}/next", response_model=SolveSessionResponse)
async def next_problem(
    session_id: str,
    request: SolveStartRequest | None = None,
    store: RecordStore = Depends(get_store),
    context: SessionContext = Depends(get_context),
) -> SolveSessionResponse:
    """Move the session to another random problem."""
    filters = parse_filters(request.category, request.difficulty) if request else None
    try:
        session = await get_session_manager().next_problem(
            store, session_id, context, filters
        )
    except KeyError:
        raise _not_found(session_id)
    except ProblemSelectionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _session_response(session)


@router.post("/{session_id}/reveal", response_model=SolveSessionResponse)
async def reveal_solution(session_id: str) -> SolveSessionResponse:
    """Show the official solution. A correct answer then earns 75 points."""
    try:
        session = await get_session_manager().reveal_solution(session_id)
    except KeyError:
        raise _not_found(session_id)
    return _session_response(session)


@router.post("/{session_id}/answer", response_model=AnswerResponse)
async def submit_answer(
    session_id: str,
    request: AnswerRequest,
    store: RecordStore = Depends(get_store),
    context: SessionContext = Depends(get_context),
) -> AnswerResponse:
    """Check an answer; score and persist it when correct."""
    try:
        session, result = await get_session_manager().submit_answer(
            store, session_id, context, request.answer
        )
    except KeyError:
        raise _not_found(session_id)
    except AnswerValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SolveStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Answer was correct but could not be fully saved: {e}",
        )

    if result is None:
        return AnswerResponse(correct=False, session=_session_response(session))

    profile = result.context.profile
    return AnswerResponse(
        correct=True,
        points_earned=result.points,
        persisted=result.persisted,
        profile=ProfileResponse.from_profile(profile) if profile else None,
        session=_session_response(session),
    )


@router.put("/{session_id}/notes", response_model=SolveSessionResponse)
async def update_notes(session_id: str, request: NotesRequest) -> SolveSessionResponse:
    """Replace the session's notes (not saved until the vault is saved)."""
    try:
        session = await get_session_manager().update_notes(session_id, request.notes)
    except KeyError:
        raise _not_found(session_id)
    return _session_response(session)


@router.post("/{session_id}/vault", response_model=VaultSaveResponse)
async def save_vault(
    session_id: str,
    store: RecordStore = Depends(get_store),
    context: SessionContext = Depends(get_context),
) -> VaultSaveResponse:
    """Save notes and scratchpad for the signed-in user."""
    try:
        saved = await get_session_manager().save_vault(store, session_id, context)
    except KeyError:
        raise _not_found(session_id)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return VaultSaveResponse(saved=saved)


@router.post("/{session_id}/scratchpad", response_model=ScratchpadResponse)
async def scratchpad_events(
    session_id: str, request: ScratchpadEventsRequest
) -> ScratchpadResponse:
    """Apply drawing events and return the latest snapshot."""
    try:
        session = await get_session_manager().apply_scratchpad_events(
            session_id, request.events, Bounds(left=request.left, top=request.top)
        )
    except KeyError:
        raise _not_found(session_id)
    except ScratchpadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    pad = session.scratchpad
    return ScratchpadResponse(
        state="drawing" if isinstance(pad.state, Drawing) else "idle",
        tool=pad.tool.value,
        blank=pad.is_blank,
        snapshot=session.scratchpad_data,
    )
