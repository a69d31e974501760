"""Leaderboard, history and rank endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from mathsolve.core.leaderboard import fetch_history, fetch_leaderboard
from mathsolve.core.models import SessionContext
from mathsolve.core.ranking import RANK_COLORS, rank_of
from mathsolve.store.base import RecordStore, StoreError
from mathsolve.web.dependencies import get_context, get_store, require_signed_in
from mathsolve.web.schemas import (
    HistoryItemResponse,
    HistoryResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
    RankResponse,
)

router = APIRouter(prefix="/api", tags=["leaderboard"])


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(store: RecordStore = Depends(get_store)) -> LeaderboardResponse:
    """Top players by total score."""
    entries = await fetch_leaderboard(store)
    return LeaderboardResponse(
        entries=[LeaderboardEntryResponse.from_entry(e) for e in entries],
        count=len(entries),
    )


@router.get("/history", response_model=HistoryResponse)
async def history(
    store: RecordStore = Depends(get_store),
    context: SessionContext = Depends(get_context),
) -> HistoryResponse:
    """The caller's latest submissions."""
    context = require_signed_in(context)
    try:
        items = await fetch_history(store, context)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return HistoryResponse(
        items=[HistoryItemResponse.from_item(i) for i in items],
        count=len(items),
    )


@router.get("/ranks/{score}", response_model=RankResponse)
async def rank(score: int) -> RankResponse:
    """Rank tier for a score."""
    tier = rank_of(score)
    return RankResponse(score=score, rank=tier.value, color=RANK_COLORS[tier])
