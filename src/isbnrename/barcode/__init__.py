# ABOUTME: Barcode package: locating an ISBN-13 barcode in cover scans.
# ABOUTME: Exports the backend, the banded locator, and the directory sampler.

from isbnrename.barcode.backend import (
    BackendCapabilityError,
    BarcodeBackend,
    ImageDecodeError,
    PillowBackend,
)
from isbnrename.barcode.locator import BarcodeLocator, ScanOptions
from isbnrename.barcode.sampler import DirectorySampler

__all__ = [
    "BackendCapabilityError",
    "BarcodeBackend",
    "BarcodeLocator",
    "DirectorySampler",
    "ImageDecodeError",
    "PillowBackend",
    "ScanOptions",
]
