"""Accounts: sign-up, sign-in and profile refresh.

Profiles carry a PBKDF2-HMAC-SHA256 password hash (hex) and a per-account
salt. Every operation returns a new SessionContext; nothing here holds
session state between calls.
"""

from __future__ import annotations

import hashlib
import hmac
import uuid

import structlog

from mathsolve.core.models import Profile, SessionContext
from mathsolve.store.base import RecordStore, StoreError, eq

logger = structlog.get_logger(__name__)

DEFAULT_ITERATIONS = 100_000
STARTING_ELO = 1000


class AccountError(Exception):
    """Sign-up or sign-in failure, with a message fit for the user."""


class DuplicateAccountError(AccountError):
    """An account with the email already exists."""


class AccountValidationError(AccountError):
    """Missing or empty account field, rejected before any store call."""


def hash_password(password: str, salt: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """PBKDF2-HMAC-SHA256, 32 bytes, hex-encoded."""
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations, dklen=32
    )
    return digest.hex()


def _require(**fields: str | None) -> None:
    for name, value in fields.items():
        if value is None or not value.strip():
            raise AccountValidationError(f"{name.capitalize()} is required.")


async def fetch_profile(store: RecordStore, user_id: str) -> Profile | None:
    """Read a profile by user_id."""
    row = await store.select_one("profiles", [eq("user_id", user_id)])
    return Profile.from_record(row) if row else None


async def sign_up(
    store: RecordStore,
    email: str,
    password: str,
    username: str,
    iterations: int = DEFAULT_ITERATIONS,
) -> SessionContext:
    """Create an account and return its session.

    Raises:
        AccountValidationError: If email, password or username is empty
        DuplicateAccountError: If the email is already registered
        AccountError: If the store rejects the new profile
    """
    _require(email=email, password=password, username=username)
    email = email.strip()
    username = username.strip()

    try:
        existing = await store.select_one(
            "profiles", [eq("email", email)], columns=["user_id"]
        )
        if existing:
            raise DuplicateAccountError(
                "An account with this email already exists. Please sign in instead."
            )

        salt = str(uuid.uuid4())
        user_id = str(uuid.uuid4())
        await store.insert(
            "profiles",
            {
                "user_id": user_id,
                "email": email,
                "username": username,
                "password_hash": hash_password(password, salt, iterations),
                "salt": salt,
                "total_score": 0,
                "elo_rating": STARTING_ELO,
            },
        )
        profile = await fetch_profile(store, user_id)
    except StoreError as e:
        logger.warning("accounts.signup_failed", email=email, error=str(e))
        raise AccountError(str(e)) from e

    logger.info("accounts.signed_up", user_id=user_id)
    return SessionContext(
        user_id=user_id, email=email, username=username, profile=profile
    )


async def sign_in(
    store: RecordStore,
    email: str,
    password: str,
    iterations: int = DEFAULT_ITERATIONS,
) -> SessionContext:
    """Verify credentials and return the session.

    Raises:
        AccountValidationError: If email or password is empty
        AccountError: Unknown email, hash-less account, wrong password, or
            store failure
    """
    _require(email=email, password=password)
    email = email.strip()

    try:
        row = await store.select_one("profiles", [eq("email", email)])
    except StoreError as e:
        logger.warning("accounts.signin_failed", email=email, error=str(e))
        raise AccountError(str(e)) from e

    if row is None:
        raise AccountError("No account found with this email address.")
    if not row.get("password_hash"):
        raise AccountError(
            "This account was created with a different method. Please contact support."
        )

    candidate = hash_password(password, row.get("salt") or "", iterations)
    if not hmac.compare_digest(candidate, row["password_hash"]):
        logger.info("accounts.wrong_password", user_id=row["user_id"])
        raise AccountError("Incorrect password. Please try again.")

    profile = Profile.from_record(row)
    logger.info("accounts.signed_in", user_id=profile.user_id)
    return SessionContext(
        user_id=profile.user_id,
        email=email,
        username=profile.username,
        profile=profile,
    )


def sign_out(context: SessionContext) -> SessionContext:
    """Drop the session."""
    if context.is_signed_in:
        logger.info("accounts.signed_out", user_id=context.user_id)
    return SessionContext.anonymous()


async def refresh_profile(store: RecordStore, context: SessionContext) -> SessionContext:
    """Re-read the profile and return a new context holding it.

    Anonymous contexts are returned unchanged.
    """
    if not context.is_signed_in:
        return context
    profile = await fetch_profile(store, context.user_id)
    return context.with_profile(profile)


async def resume_session(store: RecordStore, user_id: str) -> SessionContext | None:
    """Rebuild a session from a stored user_id, or None if it is unknown."""
    profile = await fetch_profile(store, user_id)
    if profile is None:
        return None
    return SessionContext.for_profile(profile)
