# ABOUTME: CLI package for isbnrename, built on Click.
# ABOUTME: Defines the root command group, configures logging, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from isbnrename.cli.commands import preview_cmd, rename_cmd


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr through Rich, keeping stdout for results."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)


@click.group()
@click.version_option(package_name="isbnrename")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """isbnrename - rename scanned-book folders from their ISBN barcode."""
    _configure_logging(verbose)


cli.add_command(rename_cmd.rename)
cli.add_command(preview_cmd.preview)
