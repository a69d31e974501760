"""Problem endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from mathsolve.core.problem_selection import (
    ProblemFilters,
    ProblemSelectionError,
    default_source,
    select_problem,
)
from mathsolve.store.base import RecordStore
from mathsolve.web.dependencies import get_store
from mathsolve.web.schemas import ProblemResponse

router = APIRouter(prefix="/api/problems", tags=["problems"])


def parse_filters(category: str | None, difficulty: str | None) -> ProblemFilters:
    """Parse query filters, mapping bad values to 400."""
    try:
        return ProblemFilters.parse(category, difficulty)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/random", response_model=ProblemResponse)
async def random_problem(
    category: str = "ALL",
    difficulty: str = "ALL",
    store: RecordStore = Depends(get_store),
) -> ProblemResponse:
    """Draw a random problem matching the filters."""
    filters = parse_filters(category, difficulty)
    try:
        problem = await select_problem(default_source(store), filters)
    except ProblemSelectionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ProblemResponse.from_problem(problem)
