"""Tests for mathsolve CLI commands."""

import asyncio

import pytest
from typer.testing import CliRunner

from mathsolve.cli.commands import app
from mathsolve.core.accounts import sign_up
from mathsolve.core.demo_data import DEMO_LEADERS
from mathsolve.store.base import eq
from mathsolve.store.sqlite_store import SqliteRecordStore

runner = CliRunner()


@pytest.fixture
def cli_env(tmp_path, test_iterations):
    """Environment pointing the CLI at a config with a cheap password hash."""
    path = tmp_path / "cli_config.yaml"
    path.write_text(f"auth:\n  pbkdf2_iterations: {test_iterations}\n", encoding="utf-8")
    return {"MATHSOLVE_CONFIG": str(path)}


class TestCheckCommand:
    """Tests for mathsolve check."""

    def test_match(self):
        result = runner.invoke(app, ["check", "5 / 12", "5/12"])
        assert result.exit_code == 0
        assert "Correct" in result.output

    def test_mismatch_exits_1(self):
        result = runner.invoke(app, ["check", "049", "49"])
        assert result.exit_code == 1
        assert "Incorrect" in result.output


class TestRankCommand:
    """Tests for mathsolve rank."""

    def test_rank(self):
        result = runner.invoke(app, ["rank", "2500"])
        assert result.exit_code == 0
        assert "Platinum" in result.output

    def test_rank_low(self):
        result = runner.invoke(app, ["rank", "0"])
        assert "Bronze" in result.output


class TestDatabaseCommands:
    """Tests for init-db, seed and leaderboard."""

    def test_init_db(self, tmp_path):
        db_path = tmp_path / "db" / "cli.db"
        result = runner.invoke(app, ["init-db", "--db", str(db_path)])
        assert result.exit_code == 0
        assert db_path.exists()

    def test_seed_stores_regular_problems(self, tmp_path):
        db_path = tmp_path / "cli.db"

        result = runner.invoke(app, ["seed", "--db", str(db_path)])

        assert result.exit_code == 0
        assert "Seeded 5 problems" in result.output
        rows = asyncio.run(SqliteRecordStore(db_path).select("problems", order_by="id"))
        assert [r["id"] for r in rows] == ["seed-1", "seed-2", "seed-3", "seed-4", "seed-5"]

    def test_seed_twice_is_idempotent(self, tmp_path):
        db_path = tmp_path / "cli.db"
        runner.invoke(app, ["seed", "--db", str(db_path)])
        runner.invoke(app, ["seed", "--db", str(db_path)])
        rows = asyncio.run(SqliteRecordStore(db_path).select("problems"))
        assert len(rows) == 5

    def test_leaderboard_demo_board(self, tmp_path):
        result = runner.invoke(app, ["leaderboard", "--db", str(tmp_path / "cli.db")])
        assert result.exit_code == 0
        assert DEMO_LEADERS[0][0] in result.output


class TestPracticeCommand:
    """Tests for mathsolve practice."""

    def test_wrong_then_correct(self, seeded_store):
        result = runner.invoke(
            app,
            ["practice", "-c", "CALCULUS", "--db", str(seeded_store.db_path)],
            input="x\n2x\nn\n",
        )
        assert result.exit_code == 0
        assert "Incorrect" in result.output
        assert "You earned +100 pts" in result.output

    def test_reveal_then_correct(self, seeded_store):
        result = runner.invoke(
            app,
            ["practice", "-c", "GEOMETRY", "--db", str(seeded_store.db_path)],
            input="?\n4\nn\n",
        )
        assert result.exit_code == 0
        assert "Official Solution" in result.output
        assert "You earned +75 pts" in result.output

    def test_empty_answer_warns(self, seeded_store):
        result = runner.invoke(
            app,
            ["practice", "-c", "CALCULUS", "--db", str(seeded_store.db_path)],
            input="\nq\n",
        )
        assert result.exit_code == 0
        assert "Please enter an answer" in result.output

    def test_bad_band_exits_1(self, seeded_store):
        result = runner.invoke(
            app, ["practice", "-d", "2-9", "--db", str(seeded_store.db_path)]
        )
        assert result.exit_code == 1

    def test_signed_in_score_recorded(self, seeded_store, cli_env, test_iterations):
        context = asyncio.run(
            sign_up(seeded_store, "ada@example.com", "secret", "ada", iterations=test_iterations)
        )

        result = runner.invoke(
            app,
            [
                "practice",
                "-c",
                "NUMBER THEORY",
                "--email",
                "ada@example.com",
                "--password",
                "secret",
                "--db",
                str(seeded_store.db_path),
            ],
            input="49\nn\n",
            env=cli_env,
        )

        assert result.exit_code == 0
        assert "Signed in as ada" in result.output
        profile = asyncio.run(seeded_store.select_one("profiles", [eq("user_id", context.user_id)]))
        assert profile["total_score"] == 100

    def test_wrong_password_exits_1(self, seeded_store, cli_env, test_iterations):
        asyncio.run(
            sign_up(seeded_store, "ada@example.com", "secret", "ada", iterations=test_iterations)
        )
        result = runner.invoke(
            app,
            ["practice", "--email", "ada@example.com", "--password", "bad", "--db", str(seeded_store.db_path)],
            env=cli_env,
        )
        assert result.exit_code == 1
        assert "Incorrect password" in result.output
