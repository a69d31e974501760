"""CLI commands for mathsolve.

Commands:
- serve: Run the Web API with uvicorn
- init-db: Create the local SQLite schema
- seed: Load the built-in problems into the local store
- practice: Solve random problems in the terminal
- leaderboard: Show the top players
- rank: Rank tier for a score
- check: Compare an answer against a canonical answer
"""

import asyncio
import random
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mathsolve.config.app_config import build_store, load_app_config
from mathsolve.core.accounts import AccountError, sign_in
from mathsolve.core.answer_checker import is_correct, normalize_answer
from mathsolve.core.demo_data import DEMO_PROBLEMS
from mathsolve.core.leaderboard import fetch_leaderboard
from mathsolve.core.models import Problem, SessionContext
from mathsolve.core.problem_selection import (
    ProblemFilters,
    ProblemSelectionError,
    default_source,
    select_problem,
)
from mathsolve.core.ranking import RANK_COLORS, difficulty_label, rank_of
from mathsolve.core.scoring import record_correct_submission
from mathsolve.store.base import RecordStore, StoreError
from mathsolve.store.sqlite_store import SqliteRecordStore

app = typer.Typer(
    name="mathsolve",
    help="Math practice: random problems, answer checking, scores and ranks.",
    no_args_is_help=True,
)

console = Console()

DbOption = typer.Option(None, "--db", help="SQLite database file (overrides config)")

MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}


def _open_store(db: Path | None) -> RecordStore:
    """Store from --db, else from configuration."""
    if db is not None:
        store = SqliteRecordStore(db)
        store.init_db()
        return store
    return build_store(load_app_config())


def _parse_filters_or_exit(category: str, difficulty: str) -> ProblemFilters:
    try:
        return ProblemFilters.parse(category, difficulty)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


def _show_problem(problem: Problem) -> None:
    label, color = difficulty_label(problem.difficulty)
    meta = f"{problem.category.value} · [{color}]LEVEL {problem.difficulty} — {label.upper()}[/{color}]"
    if problem.source:
        meta += f" · {escape(problem.source)}"
    console.print(
        Panel(
            f"{escape(problem.statement_latex)}\n\n[bold]{escape(problem.question_text)}[/bold]",
            title=meta,
            expand=False,
        )
    )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    uvicorn.run("mathsolve.web.api:app", host=host, port=port, reload=reload)


@app.command(name="init-db")
def init_db(db: Path | None = DbOption) -> None:
    """Create the local database schema."""
    path = db or Path(load_app_config().store.db_path)
    SqliteRecordStore(path).init_db()
    console.print(f"[green]✓ Database ready:[/green] {path}")


@app.command()
def seed(db: Path | None = DbOption) -> None:
    """Insert the built-in problems into the store as regular problems."""
    store = _open_store(db)

    async def _seed() -> int:
        count = 0
        for problem in DEMO_PROBLEMS:
            record = problem.to_record()
            record["id"] = problem.id.replace("demo", "seed", 1)
            await store.upsert("problems", record, on_conflict=("id",))
            count += 1
        return count

    try:
        count = asyncio.run(_seed())
    except StoreError as e:
        console.print(f"[red]✗ Seeding failed: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Seeded {count} problems[/green]")


@app.command()
def practice(
    category: str = typer.Option("ALL", "--category", "-c", help="Category or ALL"),
    difficulty: str = typer.Option("ALL", "--difficulty", "-d", help="1-3, 4-6, 7-10 or ALL"),
    email: str | None = typer.Option(None, "--email", help="Sign in to record scores"),
    password: str | None = typer.Option(None, "--password", help="Password (prompted if omitted)"),
    seed_value: int | None = typer.Option(None, "--seed", help="Random seed"),
    db: Path | None = DbOption,
) -> None:
    """Solve random problems in the terminal.

    Type ? to reveal the solution (a correct answer then earns 75 points
    instead of 100), q to quit.
    """
    filters = _parse_filters_or_exit(category, difficulty)
    store = _open_store(db)
    rng = random.Random(seed_value)

    context = SessionContext.anonymous()
    if email:
        if password is None:
            password = typer.prompt("Password", hide_input=True)
        try:
            context = asyncio.run(
                sign_in(
                    store,
                    email,
                    password,
                    iterations=load_app_config().auth.pbkdf2_iterations,
                )
            )
        except AccountError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(code=1)
        console.print(f"Signed in as [bold]{context.username}[/bold] ({context.total_score} pts)")

    source = default_source(store)
    while True:
        try:
            problem = asyncio.run(select_problem(source, filters, rng))
        except ProblemSelectionError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(code=1)

        _show_problem(problem)
        revealed = False

        while True:
            answer = typer.prompt("Answer (? = solution, q = quit)", default="", show_default=False)
            if answer.strip().lower() == "q":
                return
            if answer.strip() == "?":
                revealed = True
                console.print(Panel(escape(problem.solution_latex), title="Official Solution", expand=False))
                console.print("Submit the correct answer to earn [bold]+75 pts[/bold]")
                continue
            if not answer.strip():
                console.print("[yellow]Please enter an answer.[/yellow]")
                continue
            if not is_correct(answer, problem.final_answer):
                console.print("[red]✗ Incorrect. Try again or view the solution.[/red]")
                continue

            try:
                result = asyncio.run(
                    record_correct_submission(store, context, problem, revealed)
                )
            except StoreError as e:
                console.print(f"[yellow]⚠ Correct, but the score was not saved: {e}[/yellow]")
                break

            context = result.context
            suffix = " (solution was shown)" if revealed else ""
            console.print(f"[green]✓ Correct! You earned +{result.points} pts{suffix}[/green]")
            if context.is_signed_in:
                tier = rank_of(context.total_score)
                console.print(
                    f"Total: {context.total_score} pts · "
                    f"[{RANK_COLORS[tier]}]{tier.value}[/{RANK_COLORS[tier]}]"
                )
            break

        if not typer.confirm("Next problem?", default=True):
            return


@app.command()
def leaderboard(db: Path | None = DbOption) -> None:
    """Show the global leaderboard."""
    store = _open_store(db)
    entries = asyncio.run(fetch_leaderboard(store))

    table = Table(title="Global Leaderboard")
    table.add_column("#", justify="right")
    table.add_column("Player")
    table.add_column("Rank")
    table.add_column("ELO", justify="right")
    table.add_column("Score", justify="right")

    for entry in entries:
        color = RANK_COLORS[entry.rank]
        table.add_row(
            MEDALS.get(entry.position, f"#{entry.position}"),
            entry.username,
            f"[{color}]{entry.rank.value}[/{color}]",
            str(entry.elo_rating),
            f"{entry.total_score:,} pts",
        )

    console.print(table)


@app.command()
def rank(score: int = typer.Argument(..., help="Cumulative score")) -> None:
    """Print the rank tier for a score."""
    tier = rank_of(score)
    console.print(f"[{RANK_COLORS[tier]}]{tier.value}[/{RANK_COLORS[tier]}]")


@app.command()
def check(
    answer: str = typer.Argument(..., help="Submitted answer"),
    canonical: str = typer.Argument(..., help="Canonical answer"),
) -> None:
    """Compare an answer with the canonical one (exit code 1 if different)."""
    if is_correct(answer, canonical):
        console.print(f"[green]✓ Correct[/green] ({normalize_answer(answer)})")
        return
    console.print(
        f"[red]✗ Incorrect[/red] ({normalize_answer(answer)} ≠ {normalize_answer(canonical)})"
    )
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
