"""Request dependencies: record store and caller's session."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request, status

from mathsolve.config.app_config import build_store
from mathsolve.core.accounts import resume_session
from mathsolve.core.models import SessionContext
from mathsolve.store.base import RecordStore, StoreError


def get_store(request: Request) -> RecordStore:
    """The app's record store, built from config on first use."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        store = build_store()
        request.app.state.store = store
    return store


async def get_context(
    request: Request,
    x_user_id: str | None = Header(default=None),
) -> SessionContext:
    """Session for the X-User-Id header; anonymous when the header is absent.

    The header is a capability held by the client, not an authentication.
    """
    if not x_user_id:
        return SessionContext.anonymous()

    try:
        context = await resume_session(get_store(request), x_user_id)
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Profile lookup failed: {e}",
        ) from e

    if context is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown session. Please sign in again.",
        )
    return context


def require_signed_in(context: SessionContext) -> SessionContext:
    """Reject anonymous callers with 401."""
    if not context.is_signed_in:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in required",
        )
    return context
