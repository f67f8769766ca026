"""Main CLI application using Typer."""
import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..blobs import BlobStoreError
from ..config import SUPPORTED_LANGUAGES, Settings
from ..conversation import ConversationSession
from ..logging_setup import setup_logging
from ..messages import MessageStoreError, Role
from .providers import (
    get_blob_store,
    get_cache,
    get_message_store,
    get_settings,
    get_translation_provider,
    get_translator,
)

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="medlingo",
    help="Realtime bilingual doctor/patient chat with AI translation",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


def _check_language(language: str | None) -> str | None:
    if language is not None and language not in SUPPORTED_LANGUAGES:
        console.print(
            f"[red]Error: Unsupported language '{language}'. "
            f"Choose one of: {', '.join(SUPPORTED_LANGUAGES)}[/red]"
        )
        raise typer.Exit(code=1)
    return language


@asynccontextmanager
async def open_session(
    settings: Settings,
    role: Role,
    language: str | None = None,
    with_audio: bool = False,
):
    """Connect the store and provider and start a session; tear all of it down after."""
    store = get_message_store(settings)
    provider = get_translation_provider(settings, console)
    session = ConversationSession(
        store=store,
        provider=provider,
        cache=get_cache(settings),
        role=role,
        target_language=language,
        blob_store=get_blob_store(settings) if with_audio else None,
        debounce=settings.debounce_seconds,
    )
    try:
        await store.connect()
        await session.start()
        yield session
    finally:
        await session.close()
        await provider.close()
        await store.disconnect()


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default: $HOST or 0.0.0.0)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: $PORT or 3000)"),
):
    """Run the HTTP translation service."""
    import uvicorn

    from ..server import create_app

    settings = get_settings()
    setup_logging(settings.log_level, console=console)

    translator = get_translator(settings, console)
    api = create_app(translator, allowed_origins=settings.allowed_origins)

    console.print(f"[green]Server running on port {port or settings.port}[/green]")
    uvicorn.run(
        api,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command()
def chat(
    role: Role = typer.Option(Role.DOCTOR, "--role", "-r", help="Who you are speaking as"),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Language to read messages in (default depends on role)"
    ),
    log_file: Path = typer.Option(
        Path("./medlingo.log"), "--log-file", help="Where to write logs while the TUI runs"
    ),
):
    """Open the consultation room in the terminal."""
    from ..ui import run_textual_tui

    settings = get_settings()
    setup_logging(settings.log_level, log_file=log_file)
    _check_language(language)

    async def _chat():
        async with open_session(settings, role, language, with_audio=True) as session:
            await run_textual_tui(session)

    try:
        asyncio.run(_chat())
    except MessageStoreError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def history(
    role: Role = typer.Option(Role.DOCTOR, "--role", "-r", help="Viewer role"),
    language: str | None = typer.Option(None, "--language", "-l", help="Language to read in"),
    search: str = typer.Option("", "--search", "-s", help="Only show messages containing this text"),
):
    """Print the conversation translated for a viewer."""
    settings = get_settings()
    setup_logging(settings.log_level, console=console)
    _check_language(language)

    async def _history():
        async with open_session(settings, role, language) as session:
            session.set_search_term(search)
            with console.status("[dim]Fetching missing translations...[/dim]"):
                await session.reconciler.wait_idle()

            entries = session.entries()
            table = Table(
                title=f"Consultation ({session.state.target_language})",
                show_lines=True,
            )
            table.add_column("Time", style="dim", no_wrap=True)
            table.add_column("Role", style="bold")
            table.add_column("Original")
            table.add_column("Translation", style="italic")

            for entry in entries:
                original = entry.text_original
                if entry.audio_url:
                    original = f"{original}\n[dim]{entry.audio_url}[/dim]"
                table.add_row(
                    entry.created_at.astimezone().strftime("%H:%M"),
                    entry.role.value.upper(),
                    original,
                    entry.display_translation or "",
                )

            if entries:
                console.print(table)
            else:
                console.print("[dim]No messages.[/dim]")

    try:
        asyncio.run(_history())
    except MessageStoreError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def send(
    text: str = typer.Argument(..., help="Message text"),
    role: Role = typer.Option(Role.DOCTOR, "--role", "-r", help="Who is speaking"),
    language: str | None = typer.Option(None, "--language", "-l", help="Language to translate into"),
    audio: Path | None = typer.Option(
        None, "--audio", "-a", exists=True, dir_okay=False, help="Send this recording instead of text"
    ),
):
    """Send one message to the conversation."""
    settings = get_settings()
    setup_logging(settings.log_level, console=console)
    _check_language(language)

    async def _send():
        async with open_session(settings, role, language, with_audio=audio is not None) as session:
            if audio is not None:
                message = await session.send_audio(audio.read_bytes())
            else:
                message = await session.send(text)

            if message is None:
                console.print("[yellow]Nothing to send.[/yellow]")
                return
            console.print(
                f"[green]Sent #{message.id}[/green] "
                f"[dim]({message.target_language})[/dim] {message.text_translated}"
            )

    try:
        asyncio.run(_send())
    except (MessageStoreError, BlobStoreError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def summarize(
    role: Role = typer.Option(Role.DOCTOR, "--role", "-r", help="Viewer role"),
):
    """Generate a summary of the whole conversation."""
    settings = get_settings()
    setup_logging(settings.log_level, console=console)

    async def _summarize():
        async with open_session(settings, role) as session:
            with console.status("[dim]Generating summary...[/dim]"):
                summary = await session.summarize()
            from rich.markdown import Markdown
            console.print(Panel(Markdown(summary), title="Conversation Summary", border_style="yellow"))

    try:
        asyncio.run(_summarize())
    except MessageStoreError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
