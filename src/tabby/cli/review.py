# ABOUTME: Interactive selection session for scanned book candidates.
# ABOUTME: Displays candidates in a Rich table and prompts the user to choose.

import click
from rich.console import Console
from rich.table import Table

from tabby.catalog.types import Candidate


def candidate_table(candidates: list[Candidate], title: str = "Candidates") -> Table:
    """Build the numbered candidate table shared by scan and search."""
    table = Table(title=title)
    table.add_column("#", style="bold", width=3)
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("ISBN")
    table.add_column("Published")
    table.add_column("Pages", justify="right")

    for i, candidate in enumerate(candidates, start=1):
        table.add_row(
            str(i),
            candidate.title or "—",
            candidate.author or "—",
            candidate.isbn or "—",
            candidate.published_date or "—",
            str(candidate.page_count) if candidate.has_page_count else "—",
        )
    return table


class ConsoleNotifier:
    """Shows workflow alerts on the console."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()
        self.messages: list[str] = []

    def alert(self, message: str) -> None:
        self.messages.append(message)
        self._console.print(f"[red]{message}[/red]")


class SelectionSession:
    """Terminal selection UI for candidates.

    Cover scans accept a single number; shelf scans accept a comma
    separated list so every recognised book on the shelf can be kept.
    """

    def __init__(self, *, console: Console | None = None) -> None:
        self._console = console or Console()

    def select(self, candidates: list[Candidate], is_shelf: bool) -> list[Candidate]:
        """Present candidates and return the user's choice (empty on cancel)."""
        if not candidates:
            return []

        title = "Books found on shelf" if is_shelf else "Matching books"
        self._console.print(candidate_table(candidates, title=title))

        select_hint = "[1,2,...] Select" if is_shelf else "[1-N] Select"
        prompt = f"{select_hint}  [v1-vN] View details  [c] Cancel"

        while True:
            choice = click.prompt(prompt, type=str, default="c").strip()

            if choice.lower() == "c":
                return []

            # Detail view: v<N>
            if choice.lower().startswith("v"):
                try:
                    idx = int(choice[1:]) - 1
                except ValueError:
                    continue
                if 0 <= idx < len(candidates) and self._detail_prompt(candidates[idx]):
                    return [candidates[idx]]
                continue

            picked = self._parse_selection(choice, candidates, is_shelf)
            if picked:
                return picked

    @staticmethod
    def _parse_selection(
        choice: str, candidates: list[Candidate], is_shelf: bool
    ) -> list[Candidate]:
        parts = [p.strip() for p in choice.split(",")] if is_shelf else [choice]
        picked: list[Candidate] = []
        for part in parts:
            try:
                idx = int(part) - 1
            except ValueError:
                return []
            if not 0 <= idx < len(candidates):
                return []
            if candidates[idx] not in picked:
                picked.append(candidates[idx])
        return picked

    def _show_detail(self, candidate: Candidate) -> None:
        """Render every field of a candidate."""
        detail = Table(title=candidate.title or "Detail", show_header=False)
        detail.add_column("Field", style="bold")
        detail.add_column("Value")

        detail.add_row("Author", candidate.author or "—")
        detail.add_row("ISBN", candidate.isbn or "—")
        detail.add_row("Publisher", candidate.publisher or "—")
        detail.add_row("Published", candidate.published_date or "—")
        detail.add_row("Pages", str(candidate.page_count) if candidate.has_page_count else "—")
        detail.add_row("Summary", candidate.summary or "—")
        detail.add_row("Excerpt", candidate.excerpt or "—")
        detail.add_row("Cover", candidate.image or "—")

        self._console.print(detail)

    def _detail_prompt(self, candidate: Candidate) -> bool:
        """Show detail view; True if the user accepts this candidate."""
        self._show_detail(candidate)

        detail_choice = click.prompt(
            "[a] Accept  [b] Back to list",
            type=str,
            default="b",
        )
        return detail_choice.lower() == "a"
