# ABOUTME: Metadata package: providers, the provider chain, and the BookRecord they produce.
# ABOUTME: Exports the types most callers need.

from isbnrename.metadata.chain import DEFAULT_PROVIDERS, ProviderChain, build_providers
from isbnrename.metadata.http import IsbnHttpClient, MetadataFetchError
from isbnrename.metadata.provider import MetadataProvider
from isbnrename.metadata.types import BookRecord

__all__ = [
    "DEFAULT_PROVIDERS",
    "BookRecord",
    "IsbnHttpClient",
    "MetadataFetchError",
    "MetadataProvider",
    "ProviderChain",
    "build_providers",
]
