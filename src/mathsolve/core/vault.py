"""Vault: per-user, per-problem notes and scratchpad snapshot."""

from __future__ import annotations

import structlog

from mathsolve.core.models import SessionContext, VaultEntry
from mathsolve.store.base import RecordStore, eq

logger = structlog.get_logger(__name__)

VAULT_KEY = ("user_id", "problem_id")


async def load_vault(
    store: RecordStore, context: SessionContext, problem_id: str
) -> VaultEntry | None:
    """Saved entry for the problem, or None (also for anonymous sessions)."""
    if not context.is_signed_in:
        return None
    row = await store.select_one(
        "vault", [eq("user_id", context.user_id), eq("problem_id", problem_id)]
    )
    return VaultEntry.from_record(row) if row else None


async def save_vault(store: RecordStore, entry: VaultEntry) -> None:
    """Insert or overwrite the entry keyed by (user_id, problem_id)."""
    await store.upsert("vault", entry.to_record(), on_conflict=VAULT_KEY)
    logger.debug(
        "vault.saved",
        user_id=entry.user_id,
        problem_id=entry.problem_id,
        has_scratchpad=entry.scratchpad_data is not None,
    )
