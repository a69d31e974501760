"""Account endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from mathsolve.config.app_config import load_app_config
from mathsolve.core.accounts import (
    AccountError,
    AccountValidationError,
    DuplicateAccountError,
    sign_in,
    sign_up,
)
from mathsolve.core.models import SessionContext
from mathsolve.store.base import RecordStore
from mathsolve.web.dependencies import get_context, get_store, require_signed_in
from mathsolve.web.schemas import (
    AuthResponse,
    ProfileResponse,
    SessionPayload,
    SignInRequest,
    SignUpRequest,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(context: SessionContext) -> AuthResponse:
    return AuthResponse(
        session=SessionPayload(
            user_id=context.user_id,
            email=context.email,
            username=context.username,
        ),
        profile=ProfileResponse.from_profile(context.profile) if context.profile else None,
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignUpRequest, store: RecordStore = Depends(get_store)
) -> AuthResponse:
    """Create an account."""
    try:
        context = await sign_up(
            store,
            request.email,
            request.password,
            request.username,
            iterations=load_app_config().auth.pbkdf2_iterations,
        )
    except AccountValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DuplicateAccountError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except AccountError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return _auth_response(context)


@router.post("/signin", response_model=AuthResponse)
async def signin(
    request: SignInRequest, store: RecordStore = Depends(get_store)
) -> AuthResponse:
    """Sign in with email and password."""
    try:
        context = await sign_in(
            store,
            request.email,
            request.password,
            iterations=load_app_config().auth.pbkdf2_iterations,
        )
    except AccountValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AccountError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    return _auth_response(context)


@router.get("/me", response_model=ProfileResponse)
async def me(context: SessionContext = Depends(get_context)) -> ProfileResponse:
    """Profile of the calling session."""
    context = require_signed_in(context)
    return ProfileResponse.from_profile(context.profile)
