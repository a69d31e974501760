"""Rank tiers derived from cumulative score."""

from __future__ import annotations

from enum import Enum


class Rank(str, Enum):
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"
    DIAMOND = "Diamond"


# Inclusive lower bounds, highest first
RANK_THRESHOLDS: tuple[tuple[int, Rank], ...] = (
    (5000, Rank.DIAMOND),
    (2500, Rank.PLATINUM),
    (1000, Rank.GOLD),
    (400, Rank.SILVER),
)

RANK_COLORS: dict[Rank, str] = {
    Rank.BRONZE: "#b45309",
    Rank.SILVER: "#6b7280",
    Rank.GOLD: "#f59e0b",
    Rank.PLATINUM: "#7c3aed",
    Rank.DIAMOND: "#2563eb",
}


def rank_of(score: int) -> Rank:
    """Map a cumulative score to its rank tier.

    Scores below every threshold, negative ones included, are Bronze.
    """
    for threshold, rank in RANK_THRESHOLDS:
        if score >= threshold:
            return rank
    return Rank.BRONZE


def difficulty_label(difficulty: int) -> tuple[str, str]:
    """Display label and colour for a 1-10 difficulty."""
    if difficulty <= 3:
        return "Easy", "#16a34a"
    if difficulty <= 6:
        return "Medium", "#d97706"
    return "Hard", "#dc2626"
