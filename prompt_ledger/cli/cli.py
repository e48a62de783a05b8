"""CLI for the prompt ledger.

Admin commands to publish a prompt file as a new version and to inspect a
partition's latest version and history, using the same PromptLedger code
path as the admin UI.
"""

import asyncio
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from prompt_ledger.config.settings import settings
from prompt_ledger.core.logger import setup_logger
from prompt_ledger.db.session import check_connection, init_db
from prompt_ledger.ledger.errors import LedgerError, ValidationError
from prompt_ledger.ledger.scope import PartitionKey, resolve_partition_key
from prompt_ledger.ledger.store import PromptLedger

console = Console()

app = typer.Typer(
    name="prompt-ledger",
    help="System prompt version ledger - publish and inspect prompt versions",
    add_completion=False,
)


def _partition(workspace: str, shared: bool, author_id: str) -> PartitionKey:
    try:
        return resolve_partition_key(workspace, author_id, shared)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _run(coro):
    try:
        return asyncio.run(coro)
    except LedgerError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Write logs to this file (overrides LOG_FILE)"),
) -> None:
    setup_logger(
        level="DEBUG" if debug else settings.log_level,
        log_file=log_file or settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


@app.command("init-db")
def init_db_command() -> None:
    """Check the database connection and create the ledger tables if they do not exist."""
    try:
        dialect = check_connection()
    except SQLAlchemyError as e:
        console.print(f"[red]Error:[/red] Cannot connect to the ledger database: {e}")
        raise typer.Exit(1) from e
    init_db()
    console.print(f"Connected to {dialect} database")
    console.print("[green]Ledger tables ready[/green]")


@app.command()
def publish(
    prompt_file: Path = typer.Argument(..., help="Prompt file to publish (markdown or text)"),
    workspace: str = typer.Option(settings.default_workspace, "--workspace", "-w", help="Workspace name"),
    notes: str = typer.Option("", "--notes", "-n", help="Evaluation notes for this version"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model the prompt is tuned for"),
    author_id: str = typer.Option(settings.system_author_id, "--author-id", help="Author identity"),
    author_email: str = typer.Option(settings.system_author_email, "--author-email", help="Author email"),
    shared: bool = typer.Option(True, "--shared/--private", help="Publish to the shared or a private scope"),
) -> None:
    """Publish a prompt file as a new version."""
    if not prompt_file.is_file():
        console.print(f"[red]Error:[/red] Prompt file not found: {prompt_file}")
        raise typer.Exit(1)

    prompt_text = prompt_file.read_text(encoding="utf-8")
    logger.info(f"Read prompt file {prompt_file}, length: {len(prompt_text)}")

    partition = _partition(workspace, shared, author_id)
    record = _run(
        PromptLedger().save_record(
            partition,
            prompt_text,
            notes,
            author_id=author_id,
            author_email=author_email,
            model_identifier=model,
        )
    )
    console.print(
        Panel(
            f"Version: [bold]{record.version}[/bold]\n"
            f"Technical key: {record.technical_key}\n"
            f"Partition: {record.partition_key}\n"
            f"ID: {record.id}",
            title="Prompt published",
            border_style="green",
        )
    )


@app.command()
def latest(
    workspace: str = typer.Option(settings.default_workspace, "--workspace", "-w", help="Workspace name"),
    author_id: str = typer.Option(settings.system_author_id, "--author-id", help="Author identity (private scope)"),
    shared: bool = typer.Option(True, "--shared/--private", help="Read the shared or a private scope"),
) -> None:
    """Print the latest prompt version."""
    partition = _partition(workspace, shared, author_id)
    record = _run(PromptLedger().load_latest_record(partition))
    if record is None:
        console.print(f"[yellow]No prompt versions saved in {partition.value} yet. Publish one to create version 1.[/yellow]")
        return
    console.print(Panel(record.prompt_text, title=f"{record.technical_key} (version {record.version})"))


@app.command()
def history(
    workspace: str = typer.Option(settings.default_workspace, "--workspace", "-w", help="Workspace name"),
    author_id: str = typer.Option(settings.system_author_id, "--author-id", help="Author identity (private scope)"),
    shared: bool = typer.Option(True, "--shared/--private", help="Read the shared or a private scope"),
    limit: int | None = typer.Option(None, "--limit", "-l", help="Maximum number of entries"),
) -> None:
    """List prompt versions, newest first."""
    partition = _partition(workspace, shared, author_id)
    entries = _run(PromptLedger().list_history(partition, limit=limit))
    if not entries:
        console.print(f"[yellow]No prompt versions saved in {partition.value} yet.[/yellow]")
        return

    table = Table(title=f"Prompt history: {partition.value}")
    table.add_column("Version", justify="right")
    table.add_column("Saved at")
    table.add_column("Author")
    table.add_column("Model")
    table.add_column("Chars", justify="right")
    table.add_column("Notes")
    for entry in entries:
        table.add_row(
            str(entry.version),
            entry.saved_at.strftime("%Y-%m-%d %H:%M:%S"),
            entry.author_email or entry.author_id,
            entry.model_identifier,
            str(entry.prompt_length),
            entry.evaluation_notes,
        )
    console.print(table)


@app.command()
def show(
    version: int = typer.Argument(..., help="Version number"),
    workspace: str = typer.Option(settings.default_workspace, "--workspace", "-w", help="Workspace name"),
    author_id: str = typer.Option(settings.system_author_id, "--author-id", help="Author identity (private scope)"),
    shared: bool = typer.Option(True, "--shared/--private", help="Read the shared or a private scope"),
) -> None:
    """Print one prompt version."""
    partition = _partition(workspace, shared, author_id)
    record = _run(PromptLedger().get_version(partition, version))
    if record is None:
        console.print(f"[yellow]Version {version} not found in {partition.value}[/yellow]")
        raise typer.Exit(1)
    console.print(
        Panel(
            record.prompt_text,
            title=f"{record.technical_key} (version {record.version})",
            subtitle=f"{record.author_email or record.author_id} | {record.model_identifier}",
        )
    )
    if record.evaluation_notes:
        console.print(f"[dim]Notes:[/dim] {record.evaluation_notes}")


if __name__ == "__main__":
    app()
