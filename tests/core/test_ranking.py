"""Tests for rank tiers and difficulty labels."""

import pytest

from mathsolve.core.ranking import RANK_COLORS, Rank, difficulty_label, rank_of


class TestRankOf:
    """Tests for rank_of thresholds."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (0, Rank.BRONZE),
            (399, Rank.BRONZE),
            (400, Rank.SILVER),
            (999, Rank.SILVER),
            (1000, Rank.GOLD),
            (2499, Rank.GOLD),
            (2500, Rank.PLATINUM),
            (4999, Rank.PLATINUM),
            (5000, Rank.DIAMOND),
            (1_000_000, Rank.DIAMOND),
        ],
    )
    def test_boundaries(self, score, expected):
        assert rank_of(score) is expected

    def test_negative_is_bronze(self):
        assert rank_of(-75) is Rank.BRONZE

    def test_labels(self):
        """Rank values are the display labels."""
        assert [r.value for r in Rank] == ["Bronze", "Silver", "Gold", "Platinum", "Diamond"]

    def test_every_rank_has_color(self):
        assert set(RANK_COLORS) == set(Rank)


class TestDifficultyLabel:
    """Tests for difficulty_label."""

    def test_easy(self):
        assert difficulty_label(1)[0] == "Easy"
        assert difficulty_label(3)[0] == "Easy"

    def test_medium(self):
        assert difficulty_label(4)[0] == "Medium"
        assert difficulty_label(6)[0] == "Medium"

    def test_hard(self):
        assert difficulty_label(7)[0] == "Hard"
        assert difficulty_label(10)[0] == "Hard"
