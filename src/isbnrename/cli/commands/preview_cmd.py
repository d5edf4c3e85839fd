# ABOUTME: The `isbnrename preview` command for trying rename templates offline.
# ABOUTME: Loads each provider's saved response from a folder and shows the name it would produce.

from pathlib import Path

import click
import jinja2
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from isbnrename.cli.options import providers_option, sites_dir_option, template_option
from isbnrename.core.renamer import render_name
from isbnrename.metadata.chain import build_providers
from isbnrename.metadata.http import IsbnHttpClient, MetadataFetchError
from isbnrename.metadata.site import ProviderConfigError


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@template_option
@providers_option
@sites_dir_option
def preview(
    path: Path,
    template: jinja2.Template,
    provider_names: list[str],
    sites_dir: Path,
) -> None:
    """Render folder names from responses previously saved in PATH with --save."""
    console = Console()
    # Providers only read saved files here; the client is never used.
    with IsbnHttpClient() as http_client:
        providers = build_providers(provider_names, http_client, sites_dir)

    table = Table(title=str(path.name), show_header=True, pad_edge=False)
    table.add_column("Provider", style="bold")
    table.add_column("Folder name")

    for provider in providers:
        try:
            provider.load(path)
        except FileNotFoundError:
            table.add_row(provider.name, "[dim]no saved data[/dim]")
            continue
        except (MetadataFetchError, ProviderConfigError, OSError) as exc:
            table.add_row(provider.name, f"[red]{escape(str(exc))}[/red]")
            continue
        table.add_row(provider.name, escape(render_name(template, provider.template_context())))

    console.print(table)
