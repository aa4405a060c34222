from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import click
import typer
from rich.console import Console
from rich.table import Table

from quiz_gate.client import QuizClient
from quiz_gate.config import EndpointConfig, load_settings
from quiz_gate.data_models import LeaderboardEntry
from quiz_gate.gate import EnvironmentSignals, EventKind, InteractionEvent
from quiz_gate.sync import DataSource
from quiz_gate.utils.logging import configure_from_settings

app = typer.Typer(help="Terminal front end for the quiz client.")
console = Console()

CLI_USER_AGENT = "quiz-gate-cli/0.1"


def _terminal_environment() -> EnvironmentSignals:
    return EnvironmentSignals(user_agent=CLI_USER_AGENT)


def _build_client(config: Optional[Path], base_url: Optional[str]) -> QuizClient:
    """Load settings, apply the `--base-url` override and construct the client."""
    settings = load_settings(config)
    if base_url:
        endpoints = settings.endpoints.model_dump()
        endpoints["base_url"] = base_url
        settings.endpoints = EndpointConfig.model_validate(endpoints)
    configure_from_settings(settings.logging)
    return QuizClient(settings, _terminal_environment)


def _render_leaderboard(entries: List[LeaderboardEntry]) -> None:
    if not entries:
        console.print("[dim]No scores yet.[/dim]")
        return
    table = Table(title="Leaderboard")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Score", justify="right")
    for rank, entry in enumerate(entries, start=1):
        table.add_row(str(rank), entry.name, f"{entry.score:g}")
    console.print(table)


async def _activate(client: QuizClient) -> None:
    console.input("[bold]Press Enter to start[/bold] ")
    if not client.start(InteractionEvent(EventKind.KEY_DOWN)):
        console.print("[red]Unable to start a session from this environment.[/red]")
        raise typer.Exit(code=1)
    if client.initial_load is not None:
        await client.initial_load
    else:
        await client.load()


async def _play(config: Optional[Path], base_url: Optional[str]) -> None:
    async with _build_client(config, base_url) as client:
        await _activate(client)
        session = client.session
        if not session.questions:
            console.print("[red]No questions available.[/red]")
            raise typer.Exit(code=1)
        if client.flags.data_source == DataSource.FALLBACK.value:
            console.print("[yellow]The quiz server is unreachable; showing offline practice questions.[/yellow]")

        for number, question in enumerate(session.questions, start=1):
            console.print(f"\n[bold]{number}. {question.question}[/bold]")
            for index, choice in enumerate(question.choices, start=1):
                console.print(f"  {index}) {choice}")
            picked = typer.prompt("Your answer", type=click.IntRange(1, len(question.choices)))
            client.select_answer(question.id, question.choices[picked - 1])
            progress = session.progress
            console.print(f"[dim]{progress.answered}/{progress.total} answered[/dim]")

        while True:
            name = typer.prompt("Your name")
            outcome = await client.submit(name)
            if outcome.succeeded:
                console.print(f"\n[green]Score: {outcome.score:g}[/green] {outcome.message}")
                _render_leaderboard(session.leaderboard)
                return
            if outcome.user_visible:
                console.print(f"[red]{outcome.message}[/red]")
            if client.flags.critical_error or not client.flags.backend_available:
                raise typer.Exit(code=1)
            if not typer.confirm("Try again?", default=True):
                return


async def _leaderboard(config: Optional[Path], base_url: Optional[str]) -> None:
    async with _build_client(config, base_url) as client:
        await _activate(client)
        if client.flags.data_source == DataSource.FALLBACK.value:
            console.print("[yellow]The quiz server is unreachable; showing sample scores.[/yellow]")
        _render_leaderboard(client.session.leaderboard)


@app.command()
def play(
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
    base_url: Optional[str] = typer.Option(None, help="Override the backend base URL."),
):
    """
    Take the quiz in the terminal.

    Waits for an explicit start, loads questions and the leaderboard, asks each question,
    then submits under the entered name and prints the graded result.
    """
    asyncio.run(_play(config, base_url))


@app.command()
def leaderboard(
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
    base_url: Optional[str] = typer.Option(None, help="Override the backend base URL."),
):
    """Show the current leaderboard."""
    asyncio.run(_leaderboard(config, base_url))


if __name__ == "__main__":
    app()
