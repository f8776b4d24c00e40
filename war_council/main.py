"""Main entry point - moderator and player REPL views of the war council."""

from __future__ import annotations
import argparse
import asyncio
import logging
import math
import sys
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory

from war_council.config import Settings, load_settings
from war_council.council import WarCouncil
from war_council.data import load_council_data
from war_council.errors import (
    NoDraftError,
    UnknownAdvisorError,
    WarCouncilError,
)
from war_council.llm.openrouter import OpenRouterClient
from war_council.models.session import CouncilSnapshot, Draft


console = Console()

HISTORY_DIR = Path.home() / ".war_council"

MODERATOR_COMMANDS = [
    ("say <speaker> [@target] <text>", "Add a line to the council transcript"),
    ("plan <text>", "Set the plan under discussion ('plan clear' to remove it)"),
    ("update <text>", "Announce a world update to every advisor"),
    ("respond <advisor|all>", "Ask an advisor (or everyone) for a draft reaction"),
    ("commit <advisor>", "Make an advisor's draft their spoken position"),
    ("speak <advisor>", "Commit the draft and voice it"),
    ("history <advisor>", "Show an advisor's drafts and commits"),
    ("state", "Show the council snapshot"),
    ("chat", "Show the full transcript"),
    ("watch [seconds]", "Poll for changes until Ctrl-C"),
    ("council", "Show the public roster"),
    ("reset", "Start a fresh session"),
    ("help", "Show this help"),
    ("quit", "Exit"),
]

PLAYER_COMMANDS = {"say", "state", "chat", "watch", "council", "help", "quit", "exit"}


def print_help(view: str) -> None:
    """Print help information."""
    table = Table(title="Commands", show_header=True, header_style="bold magenta")
    table.add_column("Command", style="cyan")
    table.add_column("Description")

    for cmd, desc in MODERATOR_COMMANDS:
        if view == "player" and cmd.split()[0] not in PLAYER_COMMANDS:
            continue
        table.add_row(cmd, desc)

    console.print(table)


def support_label(support: Optional[int]) -> str:
    if support is None:
        return "[dim]-[/dim]"
    color = "green" if support >= 7 else "yellow" if support >= 4 else "red"
    return f"[{color}]{support}/10[/{color}]"


def render_snapshot(snapshot: CouncilSnapshot, view: str) -> None:
    """Draw the council table."""
    console.print(Panel(
        snapshot.plan_text or "[dim]No plan submitted.[/dim]",
        title=f"Plan  (v{snapshot.updated_index})",
        border_style="magenta",
    ))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Advisor")
    table.add_column("Support", justify="center")
    if view == "moderator":
        table.add_column("Draft")
    table.add_column("Last spoken")

    for advisor in snapshot.council:
        row = [f"[bold]{advisor.name}[/bold]\n[dim]{advisor.title}, {advisor.region}[/dim]", support_label(advisor.support)]
        if view == "moderator":
            row.append(advisor.draft.speech if advisor.draft else "[dim]-[/dim]")
        row.append(advisor.last_spoken.speech if advisor.last_spoken else "[dim]-[/dim]")
        table.add_row(*row)

    console.print(table)
    if snapshot.last_input:
        console.print(f"[dim]Last input: {snapshot.last_input.transcript_line()}[/dim]")
    console.print(f"[dim]{snapshot.chat_count} chat line(s)[/dim]")


def render_draft(council: WarCouncil, advisor_id: str, draft: Draft) -> None:
    advisor = council.get_advisor(advisor_id)
    console.print(Panel(
        draft.speech,
        title=f"{advisor.name}  {support_label(draft.support)}",
        border_style="blue",
    ))


def parse_say(parts: list[str]) -> tuple[str, Optional[str], str]:
    """Split 'say <speaker> [@target] <text...>'."""
    if len(parts) < 3:
        raise ValueError("Usage: say <speaker> [@target] <text>")
    speaker = parts[1]
    rest = parts[2:]
    target = None
    if rest[0].startswith("@"):
        target = rest[0][1:] or None
        rest = rest[1:]
    if not rest:
        raise ValueError("Usage: say <speaker> [@target] <text>")
    return speaker, target, " ".join(rest)


def parse_interval(parts: list[str], default: float = 1.0) -> float:
    """Seconds between polls for 'watch [seconds]'."""
    if len(parts) < 2:
        return default
    try:
        interval = float(parts[1])
    except ValueError:
        raise ValueError("Usage: watch [seconds]  (a positive number)") from None
    if not math.isfinite(interval) or interval <= 0:
        raise ValueError("Usage: watch [seconds]  (a positive number)")
    return interval


async def handle_respond(council: WarCouncil, parts: list[str]) -> None:
    """Generate drafts for one advisor or the whole council."""
    if len(parts) < 2:
        console.print("[red]Usage: respond <advisor|all>[/red]")
        return

    if parts[1] == "all":
        with console.status("[yellow]The council deliberates...[/yellow]"):
            results = await council.generate_all()
        for advisor_id, result in results.items():
            if isinstance(result, Exception):
                console.print(f"[red]{advisor_id}: failed to generate response ({result})[/red]")
            else:
                render_draft(council, advisor_id, result)
        return

    advisor = council.get_advisor(parts[1])
    with console.status(f"[yellow]{advisor.name} considers...[/yellow]"):
        draft = await council.generate_response(advisor.id)
    render_draft(council, advisor.id, draft)


async def handle_speak(council: WarCouncil, parts: list[str], settings: Settings, voice: bool) -> None:
    """Commit a draft and optionally save synthesized audio."""
    if len(parts) < 2:
        console.print("[red]Usage: speak <advisor>[/red]")
        return
    advisor_id = parts[1]
    text = council.speak(advisor_id)
    console.print(Panel(text, title=council.get_advisor(advisor_id).name, border_style="green"))

    if not voice:
        return
    audio = await council.synthesize_speech(advisor_id, text)
    settings.runtime_audio_dir.mkdir(parents=True, exist_ok=True)
    path = settings.runtime_audio_dir / f"{advisor_id}-{int(time.time() * 1000)}.mp3"
    path.write_bytes(audio)
    console.print(f"[dim]Audio saved to {path}[/dim]")


def handle_history(council: WarCouncil, parts: list[str]) -> None:
    if len(parts) < 2:
        console.print("[red]Usage: history <advisor>[/red]")
        return
    entries = council.history(parts[1])
    if not entries:
        console.print("[dim]No history yet[/dim]")
        return
    for entry in entries:
        style = "green" if entry.kind.value == "commit" else "yellow"
        console.print(
            f"[{style}]{entry.kind.value:>6}[/{style}] {entry.ts:%H:%M:%S} "
            f"{support_label(entry.support)} {entry.speech}"
        )


def handle_council(council: WarCouncil) -> None:
    for advisor in council.public_council():
        console.print(f"[bold cyan]{advisor.name}[/bold cyan], {advisor.title} of {advisor.region} [dim]({advisor.id})[/dim]")
        if advisor.public_agenda:
            console.print(f"  [yellow]Agenda:[/yellow] {advisor.public_agenda}")


async def watch(council: WarCouncil, view: str, interval: float) -> None:
    """Redraw whenever the version counter moves."""
    seen = -1
    console.print("[dim]Watching for updates, Ctrl-C to stop[/dim]")
    try:
        while True:
            current = council.updated_index()
            if current != seen:
                seen = current
                render_snapshot(council.snapshot(), view)
            await asyncio.sleep(interval)
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("[dim]Stopped watching[/dim]")


async def dispatch_command(
    council: WarCouncil,
    settings: Settings,
    command: str,
    view: str,
    voice: bool,
) -> bool:
    """Run one REPL command. Returns False when the user asked to quit."""
    parts = command.strip().split()
    cmd = parts[0].lower()

    if view == "player" and cmd not in PLAYER_COMMANDS:
        console.print(f"[red]'{cmd}' is only available to the moderator[/red]")
        return True

    if cmd in ("quit", "exit"):
        return False

    elif cmd == "help":
        print_help(view)

    elif cmd == "say":
        try:
            speaker, target, text = parse_say(parts)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            return True
        council.post_input(speaker, text, target)

    elif cmd == "plan":
        text = " ".join(parts[1:])
        council.set_plan("gm", "" if text == "clear" else text)
        console.print("[green]Plan cleared[/green]" if text in ("", "clear") else "[green]Plan set[/green]")

    elif cmd == "update":
        council.add_world_update(" ".join(parts[1:]))

    elif cmd == "respond":
        await handle_respond(council, parts)

    elif cmd == "commit":
        if len(parts) < 2:
            console.print("[red]Usage: commit <advisor>[/red]")
        else:
            render_draft(council, parts[1], council.commit(parts[1]))

    elif cmd == "speak":
        await handle_speak(council, parts, settings, voice)

    elif cmd == "history":
        handle_history(council, parts)

    elif cmd == "state":
        render_snapshot(council.snapshot(), view)

    elif cmd == "chat":
        for entry in council.chat():
            console.print(entry.transcript_line())

    elif cmd == "watch":
        try:
            interval = parse_interval(parts)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            return True
        await watch(council, view, interval)

    elif cmd == "council":
        handle_council(council)

    elif cmd == "reset":
        version = council.reset()
        console.print(f"[yellow]Session reset (v{version})[/yellow]")

    else:
        console.print(f"[red]Unknown command: {cmd}[/red] [dim](type 'help')[/dim]")

    return True


async def run_repl(council: WarCouncil, settings: Settings, view: str, voice: bool) -> None:
    """Main REPL loop."""
    HISTORY_DIR.mkdir(exist_ok=True)
    session: PromptSession = PromptSession(
        history=FileHistory(str(HISTORY_DIR / f"{view}_history")),
        auto_suggest=AutoSuggestFromHistory(),
    )

    render_snapshot(council.snapshot(), view)
    console.print("\n[dim]Type 'help' for commands[/dim]\n")

    while True:
        try:
            command = await session.prompt_async(f"[{view}] > ")
            if not command.strip():
                continue
            if not await dispatch_command(council, settings, command, view, voice):
                break

        except KeyboardInterrupt:
            console.print("\n[dim]Type 'quit' to exit[/dim]")

        except EOFError:
            break

        except UnknownAdvisorError as e:
            console.print(f"[red]{e}[/red]")
            if e.suggestions:
                console.print(f"[yellow]Did you mean: {', '.join(e.suggestions)}?[/yellow]")
            console.print(f"[dim]Available: {', '.join(council.advisors)}[/dim]")

        except NoDraftError as e:
            console.print(f"[red]{e}[/red] [dim](use 'respond' first)[/dim]")

        except WarCouncilError as e:
            console.print(f"[red]Error: {e}[/red]")

    console.print("[dim]The council is adjourned.[/dim]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="War Council - advisors react to your plan")
    parser.add_argument("--view", choices=["moderator", "player"], default="moderator",
                        help="Which front-end to run (default: moderator)")
    parser.add_argument("--config", type=Path, default=None,
                        help="Path to config.json (default: $WAR_COUNCIL_CONFIG or ./config.json)")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Directory holding council/, world.json, threats.json, armies.json")
    parser.add_argument("--voice", action="store_true",
                        help="Synthesize audio when an advisor speaks")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    console.print(Panel(
        "[bold magenta]Imperial War Council[/bold magenta]\n"
        f"[dim]{args.view} view[/dim]",
        border_style="magenta",
    ))

    try:
        settings = load_settings(args.config)
        if args.data_dir:
            settings.data_dir = args.data_dir
        data = load_council_data(settings.data_dir)
        llm = OpenRouterClient(settings)
    except WarCouncilError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[yellow]Set OPENROUTER_API_KEY in your .env file and check config.json[/yellow]")
        sys.exit(1)

    council = WarCouncil(data=data, settings=settings, llm=llm)

    async def _run() -> None:
        async with llm:
            await run_repl(council, settings, args.view, args.voice)

    asyncio.run(_run())


if __name__ == "__main__":
    main()
