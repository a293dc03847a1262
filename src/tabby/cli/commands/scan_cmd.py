# ABOUTME: The `tabby scan` command for adding books from a cover or shelf photo.
# ABOUTME: Uploads the image, searches the recognised titles, and prompts for a pick.

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tabby.catalog.http import TabbyHttpClient
from tabby.catalog.ingestion import ImageIngestion
from tabby.catalog.resolver import CandidateResolver
from tabby.catalog.types import ScanMode
from tabby.cli.options import cpu_url_option, gpu_url_option
from tabby.cli.review import ConsoleNotifier, SelectionSession
from tabby.config import ApiSettings
from tabby.core.handoff import SelectionHandoff, SelectionState
from tabby.core.recommendations import RecommendationList
from tabby.core.workflow import ScanStatus, ScanWorkflow

logger = logging.getLogger(__name__)


def _create_http_client(settings: ApiSettings) -> TabbyHttpClient:
    """Create the HTTP client used for both services."""
    return TabbyHttpClient(timeout=settings.timeout)


def _log_state(state: SelectionState) -> None:
    logger.debug("Selection state: %s", state.value)


def _library_table(library: RecommendationList) -> Table:
    table = Table(title="Added to library")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("ISBN")

    for book in library.in_library():
        table.add_row(book.id, book.title, book.author or "[dim]unknown[/dim]", book.isbn)
    return table


@click.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--shelf",
    is_flag=True,
    default=False,
    help="Treat the image as a bookshelf and look up every spine.",
)
@gpu_url_option
@cpu_url_option
def scan(image: Path, shelf: bool, gpu_url: str, cpu_url: str) -> None:
    """Recognise the book(s) in IMAGE and pick the right match."""
    console = Console()
    settings = ApiSettings(gpu_url=gpu_url, cpu_url=cpu_url)
    mode = ScanMode.SHELF if shelf else ScanMode.COVER

    with _create_http_client(settings) as http_client:
        workflow = ScanWorkflow(
            ingestion=ImageIngestion(http_client, settings.gpu_url),
            resolver=CandidateResolver(http_client, settings.cpu_url),
            handoff=SelectionHandoff(
                SelectionSession(console=console),
                on_state_change=_log_state,
            ),
            notifier=ConsoleNotifier(console),
        )
        outcome = workflow.run(image, mode)

    if outcome.status is ScanStatus.CANCELLED:
        console.print("[yellow]No book selected.[/yellow]")
        return
    if outcome.status is not ScanStatus.SELECTED:
        raise SystemExit(1)

    library = RecommendationList(outcome.candidates)
    for book in outcome.selected:
        library.toggle_library(book.id)

    console.print(_library_table(library))
    console.print(f"\n[dim]{len(outcome.selected)} book(s) added[/dim]")
