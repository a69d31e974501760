"""Answer checking.

Comparison is purely syntactic: both strings are lowercased, stripped of
every whitespace character and have the multiplication sign ``×`` replaced
by ``*``. There is no numeric parsing, fraction reduction or algebraic
equivalence, so ``"0.5"`` and ``"1/2"`` are different answers.
"""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s", re.UNICODE)


class AnswerValidationError(ValueError):
    """Raised when a submitted answer is empty."""


def normalize_answer(text: str) -> str:
    """Normalize an answer for comparison."""
    return _WHITESPACE.sub("", text.lower()).replace("×", "*")


def is_correct(submitted: str, canonical: str) -> bool:
    """Compare a submitted answer against the canonical one.

    Args:
        submitted: Answer typed by the user
        canonical: Stored final answer of the problem

    Returns:
        True if both normalize to the same string
    """
    return normalize_answer(submitted) == normalize_answer(canonical)


def validate_answer(submitted: str | None) -> str:
    """Reject empty answers before any comparison or remote call.

    Returns:
        The submitted answer unchanged

    Raises:
        AnswerValidationError: If the answer is empty or whitespace only
    """
    if submitted is None or not submitted.strip():
        raise AnswerValidationError("Answer must not be empty")
    return submitted
