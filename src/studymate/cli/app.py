"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.tree import Tree

from ..errors import ConfigurationError, GenerationError
from ..generation import GenerationClient
from ..notes import NotesState
from ..roadmap import ConceptDetail, RoadmapStep
from .providers import get_assistant, get_llm, get_transcript_store

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="studymate",
    help="Learning assistant with chat, roadmaps and study notes",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

_LEVEL_STYLES = {
    "debug": "dim",
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
}

STORE_OPTION = typer.Option(
    None,
    "--store",
    help="Transcript store backend: memory or sqlite (default from STUDYMATE_STORE)"
)
DB_OPTION = typer.Option(
    None,
    "--db",
    help="SQLite database path (default from STUDYMATE_DB)"
)


def _console_debug(level: str, component: str, message: str) -> None:
    style = _LEVEL_STYLES.get(level, "white")
    console.print(f"[{style}]{level.upper():<7}[/] [dim][{component}][/dim] {message}")


def render_roadmap(steps: list[RoadmapStep]) -> Tree:
    """Render roadmap steps as a Rich tree."""
    tree = Tree("[bold]Learning Roadmap[/bold]")
    for index, step in enumerate(steps, 1):
        branch = tree.add(f"[bold cyan]{index}. {step.title or 'Untitled step'}[/bold cyan]")
        if isinstance(step.descriptions, str):
            if step.descriptions:
                branch.add(step.descriptions)
            continue
        for item in step.descriptions:
            if isinstance(item, ConceptDetail):
                node = branch.add(f"[bold]{item.concept}[/bold] {item.description}")
                if item.prerequisite:
                    node.add(f"[dim]Prerequisite:[/dim] {item.prerequisite}")
                if item.estimated_time:
                    node.add(f"[dim]Estimated time:[/dim] {item.estimated_time}")
                if item.link:
                    node.add(f"[blue underline]{item.link}[/]")
            else:
                branch.add(f"{item.resource} [blue underline]{item.link}[/]")
    return tree


def _print_message(role: str, content: str) -> None:
    if role == "user":
        console.print(f"[bold yellow]You:[/bold yellow] {content}")
    else:
        console.print(Panel(Markdown(content), title="Assistant", border_style="blue"))


@app.command()
def chat(
    store: str | None = STORE_OPTION,
    db: str | None = DB_OPTION,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug messages from every component"
    ),
):
    """Chat interactively in the terminal.

    Commands: /roadmap, /notes, /concept NAME, /history, /reset, /quit.
    After /concept, press Enter on an empty line to send the prepared question.
    """
    async def _chat():
        try:
            assistant = get_assistant(store, db)
        except ConfigurationError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)

        if verbose:
            assistant.set_debug_callback(_console_debug)

        try:
            restored = await assistant.start()

            console.print("[bold cyan]Studymate[/bold cyan]")
            console.print("[dim]Type /quit to leave, /reset to start over\n[/dim]")
            if restored:
                console.print(f"[dim]Restored {len(restored)} message(s) from the last session[/dim]\n")

            while True:
                try:
                    prepared = assistant.chat.input_text
                    prompt = "[bold yellow]You[/bold yellow]"
                    if prepared:
                        prompt += f" [dim](Enter sends: {prepared})[/dim]"
                    user_input = console.input(f"{prompt}: ").strip()
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if not user_input:
                    if not prepared:
                        continue
                    user_input = prepared

                command, _, argument = user_input.partition(" ")
                command = command.lower()

                if command in ("/quit", "/exit", "/q"):
                    console.print("[dim]Goodbye![/dim]")
                    break

                if command == "/reset":
                    await assistant.reset()
                    console.print("[green]Conversation cleared.[/green]")
                    continue

                if command == "/history":
                    for message in assistant.transcript:
                        _print_message(message.role, message.content)
                    continue

                if command == "/roadmap":
                    if not assistant.roadmap.steps:
                        assistant.refresh_roadmap()
                    with console.status("[dim]Building roadmap...[/dim]"):
                        await assistant.roadmap.flush()
                    steps = assistant.roadmap.steps
                    if steps:
                        console.print(render_roadmap(steps))
                    else:
                        console.print("[dim]No roadmap yet. Ask a question first.[/dim]")
                    continue

                if command == "/notes":
                    if assistant.notes.state is NotesState.EMPTY and not assistant.notes.pending:
                        assistant.refresh_notes()
                    with console.status("[dim]Compiling notes...[/dim]"):
                        await assistant.notes.flush()
                    if assistant.notes.state is NotesState.FAILED:
                        console.print(f"[red]{assistant.notes.error}[/red]")
                    elif assistant.notes.notes:
                        console.print(Markdown(assistant.notes.notes))
                    else:
                        console.print("[dim]No notes generated yet.[/dim]")
                    continue

                if command == "/concept":
                    if not argument.strip():
                        console.print("[yellow]Usage: /concept NAME[/yellow]")
                        continue
                    assistant.select_concept(argument.strip())
                    continue

                with console.status("[dim]Thinking...[/dim]"):
                    await assistant.submit(user_input)
                transcript = assistant.transcript
                if transcript and transcript[-1].role == "assistant":
                    _print_message("assistant", transcript[-1].content)

        finally:
            await assistant.close()

    asyncio.run(_chat())


@app.command(name="tui")
def tui_command(
    store: str | None = STORE_OPTION,
    db: str | None = DB_OPTION,
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-L",
        help="Show log panel with level: debug, info, warning, error"
    ),
):
    """Launch the terminal UI (chat, roadmap and notes side by side)."""
    from ..ui import run_textual_tui

    try:
        assistant = get_assistant(store, db)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    asyncio.run(run_textual_tui(assistant, log_level=log_level))


@app.command()
def roadmap(
    topic: str = typer.Argument(..., help="Topic to build a learning roadmap for"),
):
    """Generate a one-off learning roadmap for a topic."""
    async def _roadmap():
        try:
            llm = get_llm()
        except ConfigurationError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)

        async with llm:
            client = GenerationClient(llm)
            with console.status("[dim]Building roadmap...[/dim]"):
                steps = await client.roadmap(topic)

        if not steps:
            console.print("[yellow]No roadmap could be generated for this topic.[/yellow]")
            raise typer.Exit(code=1)
        console.print(render_roadmap(steps))

    asyncio.run(_roadmap())


@app.command()
def notes(
    store: str | None = STORE_OPTION,
    db: str | None = DB_OPTION,
):
    """Compile study notes from the saved conversation."""
    async def _notes():
        transcript_store = get_transcript_store(store, db)
        await transcript_store.connect()
        try:
            messages = await transcript_store.load()
        finally:
            await transcript_store.disconnect()

        if not messages:
            console.print("[dim]No conversation saved yet - nothing to take notes on.[/dim]")
            return

        try:
            llm = get_llm()
        except ConfigurationError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)

        async with llm:
            client = GenerationClient(llm)
            try:
                with console.status("[dim]Compiling notes...[/dim]"):
                    text = await client.notes(messages)
            except GenerationError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)

        console.print(Markdown(text))

    asyncio.run(_notes())


@app.command()
def history(
    store: str | None = STORE_OPTION,
    db: str | None = DB_OPTION,
):
    """Show the saved conversation."""
    async def _history():
        transcript_store = get_transcript_store(store, db)
        await transcript_store.connect()
        try:
            messages = await transcript_store.load()
        finally:
            await transcript_store.disconnect()

        if not messages:
            console.print("[dim]No conversation saved.[/dim]")
            return
        for message in messages:
            _print_message(message.role, message.content)

    asyncio.run(_history())


@app.command()
def clear(
    store: str | None = STORE_OPTION,
    db: str | None = DB_OPTION,
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    ),
):
    """Delete the saved conversation."""
    if not yes:
        confirm = typer.confirm("Delete the saved conversation?")
        if not confirm:
            console.print("[dim]Aborted.[/dim]")
            return

    async def _clear():
        transcript_store = get_transcript_store(store, db)
        await transcript_store.connect()
        try:
            await transcript_store.clear()
        finally:
            await transcript_store.disconnect()
        console.print("[green]Conversation cleared.[/green]")

    asyncio.run(_clear())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
