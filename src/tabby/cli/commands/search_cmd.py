# ABOUTME: The `tabby search` command for looking up books by title and author.
# ABOUTME: Runs the same search a cover scan would, from typed text instead of a photo.

import click
from rich.console import Console

from tabby.catalog.errors import MalformedResponseError, SearchError
from tabby.catalog.http import TabbyHttpClient
from tabby.catalog.resolver import CandidateResolver
from tabby.catalog.types import RecognizedBook
from tabby.cli.options import cpu_url_option
from tabby.cli.review import candidate_table
from tabby.config import ApiSettings

console = Console()


def _create_http_client(settings: ApiSettings) -> TabbyHttpClient:
    """Create the HTTP client for the search service."""
    return TabbyHttpClient(timeout=settings.timeout)


@click.command("search")
@click.option("-t", "--title", default="", help="Book title to search for.")
@click.option("-a", "--author", default="", help="Author to search for.")
@cpu_url_option
def search(title: str, author: str, cpu_url: str) -> None:
    """Search the book service by title and/or author."""
    book = RecognizedBook(title=title.strip(), author=author.strip())
    if book.is_empty:
        raise click.UsageError("Provide --title, --author, or both.")

    settings = ApiSettings(cpu_url=cpu_url)
    with _create_http_client(settings) as http_client:
        resolver = CandidateResolver(http_client, settings.cpu_url)
        try:
            result = resolver.resolve_cover(book)
        except (SearchError, MalformedResponseError) as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise SystemExit(1) from exc

    if not result.candidates:
        console.print("[yellow]No books found.[/yellow]")
        return

    console.print(candidate_table(result.candidates))
    console.print(f"\n[dim]{len(result.candidates)} result(s)[/dim]")
