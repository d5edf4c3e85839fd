# ABOUTME: The `isbnrename rename` command: scan a folder, resolve its ISBN, rename it.
# ABOUTME: Wires the directory sampler, the provider chain, and the renamer together.

import logging
from pathlib import Path

import click
import jinja2
from rich.console import Console
from rich.markup import escape

from isbnrename.barcode.backend import BackendCapabilityError, BarcodeBackend, PillowBackend
from isbnrename.barcode.locator import (
    DEFAULT_HEAD_COUNT,
    DEFAULT_ROW_DIVISIONS,
    DEFAULT_TAIL_COUNT,
    BarcodeLocator,
    ScanOptions,
)
from isbnrename.barcode.sampler import DirectorySampler
from isbnrename.cli.options import providers_option, sites_dir_option, template_option
from isbnrename.core.isbn_source import isbn_from_check_file, isbn_from_name
from isbnrename.core.renamer import RenameStatus, rename_directory, render_name
from isbnrename.metadata.chain import ProviderChain, build_providers
from isbnrename.metadata.http import IsbnHttpClient
from isbnrename.metadata.site import ProviderConfigError

logger = logging.getLogger(__name__)


def _create_backend() -> BarcodeBackend:
    """Create the default image/barcode backend (Pillow + zbar)."""
    return PillowBackend()


def _create_http_client() -> IsbnHttpClient:
    """Create the HTTP client shared by all providers."""
    return IsbnHttpClient()


def _preset_isbn(path: Path, check_file: Path | None, check_names: bool) -> str | None:
    """ISBN supplied without scanning: a check file wins over the folder name."""
    if check_file is not None:
        isbn = isbn_from_check_file(check_file)
        if isbn is not None:
            logger.info("check: %s", check_file)
        return isbn
    if check_names:
        return isbn_from_name(path.resolve().name)
    return None


def _scan_for_isbn(path: Path, options: ScanOptions) -> str | None:
    backend = _create_backend()
    locator = BarcodeLocator(backend, options)
    sampler = DirectorySampler(locator, backend, options)
    return sampler.check_dir(path)


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--row",
    "row_divisions",
    type=int,
    default=DEFAULT_ROW_DIVISIONS,
    show_default=True,
    help="Number of horizontal bands each image is split into while scanning.",
)
@click.option(
    "--head",
    "head_count",
    type=int,
    default=DEFAULT_HEAD_COUNT,
    show_default=True,
    help="Images to scan from the start of the folder (0 disables).",
)
@click.option(
    "--tail",
    "tail_count",
    type=int,
    default=DEFAULT_TAIL_COUNT,
    show_default=True,
    help="Images to scan from the end of the folder if the head pass finds nothing.",
)
@click.option("--no-rotate", is_flag=True, default=False, help="Do not retry images rotated 90°.")
@click.option("--no-access", is_flag=True, default=False, help="Stop after finding the ISBN.")
@click.option("--no-rename", is_flag=True, default=False, help="Show the new name only.")
@click.option(
    "--save",
    is_flag=True,
    default=False,
    help="Save the raw metadata response into the folder.",
)
@template_option
@providers_option
@sites_dir_option
@click.option(
    "--check",
    "check_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="File holding a 13-digit ISBN; when usable, barcode scanning is skipped.",
)
@click.option(
    "--check-names",
    is_flag=True,
    default=False,
    help="Take the ISBN from the folder name when it contains one.",
)
def rename(
    path: Path,
    row_divisions: int,
    head_count: int,
    tail_count: int,
    no_rotate: bool,
    no_access: bool,
    no_rename: bool,
    save: bool,
    template: jinja2.Template,
    provider_names: list[str],
    sites_dir: Path,
    check_file: Path | None,
    check_names: bool,
) -> None:
    """Find the ISBN barcode among the images in PATH and rename PATH from its metadata."""
    console = Console()
    options = ScanOptions(
        row_divisions=row_divisions,
        head_count=head_count,
        tail_count=tail_count,
        rotate=not no_rotate,
    )

    isbn = _preset_isbn(path, check_file, check_names)
    if isbn is None:
        try:
            isbn = _scan_for_isbn(path, options)
        except BackendCapabilityError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            raise SystemExit(1) from exc
    if isbn is None:
        console.print("[red]No ISBN barcode found.[/red]")
        raise SystemExit(1)

    console.print(f"ISBN: {isbn}")
    if no_access:
        return

    with _create_http_client() as http_client:
        providers = build_providers(provider_names, http_client, sites_dir)
        provider = ProviderChain(providers).resolve(isbn)

    if provider is None:
        console.print(f"[red]No metadata found for {isbn}.[/red]")
        raise SystemExit(1)

    if save:
        try:
            saved = provider.save(path)
        except (OSError, ProviderConfigError, ValueError) as exc:
            logger.error("Saving %s response failed: %s", provider.name, exc)
        else:
            console.print(f"[dim]Saved:[/dim] {escape(saved.name)}")

    new_name = render_name(template, provider.template_context())
    if not new_name:
        console.print("[yellow]Template produced an empty name; not renaming.[/yellow]")
        return

    old_name = path.resolve().name
    console.print(f"rename: {escape(old_name)} => {escape(new_name)}")
    result = rename_directory(path, new_name, dry_run=no_rename)
    if result.status is RenameStatus.COLLISION:
        console.print("[yellow]A folder with that name already exists; not renaming.[/yellow]")
    elif result.status is RenameStatus.FAILED:
        console.print(f"[red]Rename failed:[/red] {escape(str(result.error))}")
        raise SystemExit(1)
