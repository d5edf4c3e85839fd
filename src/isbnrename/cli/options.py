# ABOUTME: Shared Click options for isbnrename commands.
# ABOUTME: Provides the rename template, provider list, and site directory flags.

from pathlib import Path

import click
import jinja2

from isbnrename.core.renamer import DEFAULT_TEMPLATE, compile_template
from isbnrename.metadata.chain import DEFAULT_PROVIDERS, parse_provider_names


def _compile_template_option(
    ctx: click.Context, param: click.Parameter, value: str
) -> jinja2.Template:
    try:
        return compile_template(value)
    except jinja2.TemplateSyntaxError as exc:
        raise click.BadParameter(f"invalid template: {exc}") from exc


def _split_providers(ctx: click.Context, param: click.Parameter, value: str) -> list[str]:
    names = parse_provider_names(value)
    if not names:
        raise click.BadParameter("at least one provider is required")
    return names


template_option = click.option(
    "--template",
    "template",
    default=DEFAULT_TEMPLATE,
    show_default=True,
    callback=_compile_template_option,
    help="Jinja2 template for the new folder name.",
)

providers_option = click.option(
    "--providers",
    "provider_names",
    default=",".join(DEFAULT_PROVIDERS),
    show_default=True,
    callback=_split_providers,
    help="Comma-separated metadata sources, tried in order. "
    "Names other than openbd/google/kokkai load <sites-dir>/<name>.yml.",
)

sites_dir_option = click.option(
    "--sites-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory holding YAML site descriptions.",
)
