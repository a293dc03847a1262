# ABOUTME: CLI package for Tabby, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from tabby.cli.commands import scan_cmd, search_cmd


@click.group()
@click.version_option(package_name="tabby")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Tabby - scan book covers and shelves into your library."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


cli.add_command(scan_cmd.scan)
cli.add_command(search_cmd.search)
