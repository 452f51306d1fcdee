"""Command-line interface for Contract Amender."""

from pathlib import Path
from typing import Optional

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from contract_amender import __version__
from contract_amender.config import get_settings
from contract_amender.core.errors import AmendmentError
from contract_amender.core.pipeline import AmendmentPipeline, BatchResult
from contract_amender.core.registry import default_registry
from contract_amender.diagnostics import (
    DiagnosticEvent,
    EventKind,
    LoggingObserver,
    setup_logging,
)
from contract_amender.formats import SUPPORTED_EXTENSIONS

app = typer.Typer(
    name="contract-amender",
    help="Insert clauses into contracts at located text anchors.",
    add_completion=False,
)
console = Console()

CLAUSES_ADAPTER = TypeAdapter(dict[str, str])


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Contract Amender v{__version__}")
        raise typer.Exit()


def list_classes_callback(value: bool) -> None:
    """Print the registered document classes and exit."""
    if value:
        for document_class in default_registry():
            console.print(
                f"[bold]{document_class.name}[/bold]: {document_class.description}"
            )
        raise typer.Exit()


def load_clauses(path: Optional[Path]) -> dict[str, str]:
    """Load a JSON object of named clause texts."""
    if path is None:
        return {}
    try:
        return CLAUSES_ADAPTER.validate_json(path.read_bytes())
    except ValidationError as e:
        raise typer.BadParameter(
            f"{path} must be a JSON object of strings: {e.error_count()} error(s)",
            param_hint="--clauses",
        ) from e


def collect_inputs(paths: list[Path], output_dir: Path) -> list[Path]:
    """Expand folders into their supported files, keeping argument order.

    Files already sitting in the output directory are skipped.
    """
    files: list[Path] = []
    skip = output_dir.resolve()
    for path in paths:
        if not path.is_dir():
            files.append(path)
            continue
        found = sorted(
            f for ext in SUPPORTED_EXTENSIONS for f in path.glob(f"*{ext}")
        )
        files.extend(f for f in found if f.resolve().parent != skip)
    return files


def print_results(batch: BatchResult) -> None:
    for result in batch:
        if result.ok:
            console.print(f"[green]Amended:[/green] {result.path} -> {result.output_path}")
        else:
            console.print(f"[red]Failed:[/red] {result.path.name}: {result.error}")


@app.command()
def main(
    paths: list[Path] = typer.Argument(
        ...,
        help="Documents or folders to amend",
        exists=True,
    ),
    clauses: Optional[Path] = typer.Option(
        None,
        "--clauses",
        "-c",
        help="JSON file mapping clause names to texts",
        exists=True,
        dir_okay=False,
    ),
    document_class: Optional[str] = typer.Option(
        None,
        "--class",
        "-k",
        help="Document class to apply (default: chosen from the file name)",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for amended documents (default: ./amended)",
    ),
    fail_fast: bool = typer.Option(
        False,
        "--fail-fast",
        "-f",
        help="Stop at the first document that fails",
    ),
    list_classes: bool = typer.Option(
        False,
        "--list-classes",
        callback=list_classes_callback,
        is_eager=True,
        help="List the available document classes and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Amend contracts by inserting clauses at located anchors.

    Examples:

        contract-amender contracts/contract1.docx

        contract-amender contracts/ --clauses clauses.json

        contract-amender nda.docx --class confidentiality-disclaimer
    """
    settings = get_settings()
    setup_logging("DEBUG" if verbose else settings.log_level, console=console)

    target_dir = output_dir or settings.output_dir
    clause_texts = load_clauses(clauses)
    files = collect_inputs(paths, target_dir)

    if not files:
        console.print(
            f"[yellow]No supported files found[/yellow]\n"
            f"Supported formats: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
        raise typer.Exit(0)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Amending documents...", total=len(files))
        log_event = LoggingObserver()

        def observe(event: DiagnosticEvent) -> None:
            log_event(event)
            if event.kind is EventKind.DOCUMENT_STARTED:
                progress.update(task, description=f"Amending {event.path.name}...")
            elif event.kind in (EventKind.DOCUMENT_WRITTEN, EventKind.DOCUMENT_FAILED):
                progress.advance(task)

        pipeline = AmendmentPipeline(
            output_dir=target_dir,
            fail_fast=fail_fast or settings.fail_fast,
            observer=observe,
        )
        try:
            batch = pipeline.process_batch(files, clause_texts, document_class)
        except AmendmentError as e:
            console.print(f"[red]Error:[/red] {e}")
            if verbose:
                console.print_exception()
            raise typer.Exit(1)

    print_results(batch)
    console.print(
        f"\n[bold]Complete:[/bold] {len(batch.output_paths)} succeeded, "
        f"{len(batch.failures)} failed"
    )
    raise typer.Exit(0 if batch.ok else 1)


if __name__ == "__main__":
    app()
