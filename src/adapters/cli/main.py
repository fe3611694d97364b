"""
adapters.cli.main - CLI adapter for the wellness agents.

Mirrors src/adapters/rest/ but for terminal use. Uses the same
ServiceFactory and Orchestrator as the REST API so all behaviour
(agents, collaboration, memory) is identical.

Commands
--------
  mood             Record a mood; MoodMate runs and collaborators follow
  journal          Save a journal entry through MindPal
  run              Run one agent directly with optional JSON input
  insights         Run InsightBot's analysis
  chat             Interactive chat with one agent
  recommendations  List an agent's active recommendations
  status           Show registered agents and their memory counters

Usage
-----
  python run_cli.py mood stressed
  python run_cli.py run FlexGenie --input '{"energyLevel": 4}'
  python run_cli.py chat MindPal
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

# Ensure src/ is on the path
_SRC = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_SRC))

import typer
from rich import box
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from agent.orchestrator import Orchestrator
from domain.exceptions import AgentNotFoundError
from domain.models import AgentRunResult, ChatTurn
from factory import ServiceFactory
from infrastructure.config import Settings

__version__ = "0.1.0"

console = Console()
app = typer.Typer(
    help="Wellness agents CLI",
    add_completion=False,
    no_args_is_help=True,
)

USER_OPTION = typer.Option(None, "--user", "-u", help="User id (defaults to DEFAULT_USER_ID).")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

async def _make_orchestrator() -> tuple[ServiceFactory, Orchestrator]:
    """Initialise the factory (migrations + default user) and build the orchestrator."""
    factory = ServiceFactory(Settings.from_env())
    await factory.initialize()
    return factory, factory.create_orchestrator()


def _resolve_user(factory: ServiceFactory, user_id: Optional[int]) -> int:
    return user_id if user_id is not None else factory.config.default_user_id


def _print_result(result: AgentRunResult) -> None:
    style = "green" if result.success else "red"
    status = "success" if result.success else f"failed ({result.error_kind or 'error'})"
    console.print(Panel(
        JSON.from_data(result.output, default=str),
        title=f"{result.agent_name}: {status}",
        subtitle=f"confidence {result.confidence:.2f}",
        border_style=style,
    ))
    if result.collaboration_triggers:
        console.print(
            f"[bold yellow]Collaboration triggered:[/bold yellow] "
            f"{', '.join(result.collaboration_triggers)}"
        )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"wellness-agents v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands: Check-ins
# ---------------------------------------------------------------------------

@app.command()
def mood(
    value: str = typer.Argument(..., help="How you feel, e.g. happy, stressed, tired."),
    user_id: Optional[int] = USER_OPTION,
) -> None:
    """Record a mood and run every agent it triggers."""

    async def _run() -> None:
        factory, orchestrator = await _make_orchestrator()
        uid = _resolve_user(factory, user_id)
        with console.status("[bold cyan]MoodMate is listening…", spinner="dots"):
            update = await orchestrator.run_mood_update(value.strip().lower(), uid)
        _print_result(update.primary)
        for result in update.collaborations:
            _print_result(result)

    asyncio.run(_run())


@app.command()
def journal(
    content: Optional[str] = typer.Argument(None, help="Entry text; prompted for when omitted."),
    user_id: Optional[int] = USER_OPTION,
) -> None:
    """Save a journal entry through MindPal."""
    text = content or Prompt.ask("[bold]Dear journal[/bold]")
    if not text.strip():
        console.print("[bold red]Nothing to save.[/bold red]")
        raise typer.Exit(code=1)

    async def _run() -> None:
        factory, orchestrator = await _make_orchestrator()
        entry = await orchestrator.save_journal_entry(_resolve_user(factory, user_id), text)
        console.print(Panel(
            f"[bold green]Saved entry #{entry.id}[/bold green]\n"
            f"[dim]Prompt:[/dim] {entry.prompt}",
            border_style="green",
        ))

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Commands: Agents
# ---------------------------------------------------------------------------

@app.command()
def run(
    agent_name: str = typer.Argument(..., help="MoodMate, NutriCoach, FlexGenie, MindPal or InsightBot."),
    input_json: str = typer.Option("{}", "--input", "-i", help="Agent input as a JSON object."),
    user_id: Optional[int] = USER_OPTION,
) -> None:
    """Run a single agent and show its result."""
    try:
        payload = json.loads(input_json)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Invalid --input JSON:[/bold red] {e}")
        raise typer.Exit(code=2)

    async def _run() -> None:
        factory, orchestrator = await _make_orchestrator()
        uid = _resolve_user(factory, user_id)
        try:
            with console.status(f"[bold cyan]{agent_name} is working…", spinner="dots"):
                result = await orchestrator.run_agent(agent_name, payload, uid)
        except AgentNotFoundError as e:
            console.print(f"[bold red]{e}[/bold red]")
            raise typer.Exit(code=1)
        _print_result(result)

    asyncio.run(_run())


@app.command()
def insights(user_id: Optional[int] = USER_OPTION) -> None:
    """Analyse mood, journal and metrics history with InsightBot."""

    async def _run() -> None:
        factory, orchestrator = await _make_orchestrator()
        with console.status("[bold cyan]Crunching your data…", spinner="dots"):
            result = await orchestrator.run_insights_analysis(_resolve_user(factory, user_id))
        _print_result(result)

    asyncio.run(_run())


@app.command()
def chat(
    agent_name: str = typer.Argument("MoodMate", help="Agent to talk to."),
    user_id: Optional[int] = USER_OPTION,
) -> None:
    """Start an interactive chat with one agent."""

    async def _run() -> None:
        factory, orchestrator = await _make_orchestrator()
        if orchestrator.get_agent(agent_name) is None:
            console.print(f"[bold red]Agent {agent_name} not found[/bold red]")
            raise typer.Exit(code=1)
        uid = _resolve_user(factory, user_id)
        history: list[ChatTurn] = []

        console.print(Panel(
            f"[bold]Chatting with {agent_name}[/bold]\n"
            "Type your message, or [bold]exit[/bold] / [bold]quit[/bold] to stop.",
            border_style="cyan",
        ))

        while True:
            try:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
            except (KeyboardInterrupt, EOFError):
                console.print("\n[dim]Goodbye![/dim]")
                break

            if user_input.strip().lower() in ("exit", "quit", "q", "bye"):
                console.print("[dim]Goodbye![/dim]")
                break

            if not user_input.strip():
                continue

            with console.status("[bold cyan]Thinking…", spinner="dots"):
                reply = await orchestrator.handle_agent_conversation(agent_name, user_input, history, uid)

            history.append(ChatTurn(role="user", content=user_input))
            history.append(ChatTurn(role="assistant", content=reply.response))

            console.print()
            console.print(Panel(reply.response, title=agent_name, border_style="green"))
            for action in reply.actions:
                console.print(f"[bold yellow]Action:[/bold yellow] {action['type']}")

    asyncio.run(_run())


@app.command()
def recommendations(
    agent_name: Optional[str] = typer.Argument(None, help="Only this agent's recommendations."),
    user_id: Optional[int] = USER_OPTION,
) -> None:
    """List active recommendations, newest first."""

    async def _run() -> None:
        factory, _ = await _make_orchestrator()
        store = factory.create_recommendation_store()
        items = await store.list_active(_resolve_user(factory, user_id), agent_name)
        if not items:
            console.print("[dim]No active recommendations.[/dim]")
            return

        t = Table(box=box.SIMPLE, padding=(0, 2))
        t.add_column("ID", style="bold")
        t.add_column("Agent")
        t.add_column("Type")
        t.add_column("Created")
        for r in items:
            t.add_row(str(r.id), r.agent_name, r.type, r.created_at)
        console.print(Panel(t, title="Active Recommendations", border_style="blue"))

    asyncio.run(_run())


@app.command()
def status(user_id: Optional[int] = USER_OPTION) -> None:
    """Show every registered agent with its memory counters."""

    async def _run() -> None:
        factory, orchestrator = await _make_orchestrator()
        agents = await orchestrator.agent_status(_resolve_user(factory, user_id))

        t = Table(box=box.SIMPLE, padding=(0, 2))
        t.add_column("Agent", style="bold")
        t.add_column("Role")
        t.add_column("Runs", justify="right")
        t.add_column("Last run")
        t.add_column("Observed", justify="right")
        for a in agents:
            memory = a.get("memory", {})
            last = memory.get("lastExecutionSuccess")
            t.add_row(
                a["name"],
                a["role"],
                str(memory.get("executionCount", 0)),
                "[dim]never[/dim]" if last is None else ("[green]ok[/green]" if last else "[red]failed[/red]"),
                str(memory.get("observationCount", 0)),
            )
        console.print(Panel(t, title="Agents", border_style="cyan"))

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Global version option
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Wellness agents CLI"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
