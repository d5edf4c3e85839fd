# ABOUTME: Ordered provider chain that resolves an ISBN against several metadata sources.
# ABOUTME: Also builds provider instances from CLI names, loading YAML sites for unknown names.

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from isbnrename.metadata.google import GoogleBooksProvider
from isbnrename.metadata.http import HttpClient, MetadataFetchError
from isbnrename.metadata.ndl import NDLProvider
from isbnrename.metadata.openbd import OpenBDProvider
from isbnrename.metadata.provider import MetadataProvider
from isbnrename.metadata.site import (
    SITE_FILE_SUFFIX,
    ProviderConfigError,
    SiteProvider,
    load_provider_spec,
)

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS = ("openbd", "google", "kokkai")

_BUILTIN_PROVIDERS = {
    "openbd": OpenBDProvider,
    "google": GoogleBooksProvider,
    "kokkai": NDLProvider,
}


def parse_provider_names(value: str) -> list[str]:
    """Split a comma-separated provider list, dropping blanks."""
    return [name.strip() for name in value.split(",") if name.strip()]


def build_providers(
    names: Iterable[str], http_client: HttpClient, sites_dir: Path
) -> list[MetadataProvider]:
    """Instantiate providers in the given order.

    Built-in names (case-insensitive) map to the fixed-endpoint providers.
    Any other name is loaded from ``<sites_dir>/<name>.yml``; a site file that
    fails to load is logged and skipped so the remaining providers still run.
    """
    providers: list[MetadataProvider] = []
    for name in names:
        builtin = _BUILTIN_PROVIDERS.get(name.lower())
        if builtin is not None:
            providers.append(builtin(http_client))
            continue
        try:
            spec = load_provider_spec(sites_dir / f"{name}{SITE_FILE_SUFFIX}", name)
        except ProviderConfigError as exc:
            logger.error("Skipping provider %s: %s", name, exc)
            continue
        providers.append(SiteProvider(spec, http_client))
    return providers


class ProviderChain:
    """Tries providers in order and keeps the first one that succeeds.

    Records are never merged: the winning provider's BookRecord is used as-is.
    """

    def __init__(self, providers: Sequence[MetadataProvider]) -> None:
        self.providers = list(providers)

    def resolve(self, isbn: str) -> MetadataProvider | None:
        """Return the first provider whose ``get`` succeeds, or None."""
        for provider in self.providers:
            try:
                record = provider.get(isbn)
            except MetadataFetchError as exc:
                logger.warning("%s lookup failed for %s: %s", provider.name, isbn, exc)
                continue
            logger.info("%s resolved %s: %s / %s", provider.name, isbn, record.title, record.author)
            return provider
        logger.error("No provider could resolve %s", isbn)
        return None
