# ABOUTME: Banded barcode search over a single decoded image.
# ABOUTME: Crops full-width bands, then retries once rotated, accepting only 978/979 codes.

import logging
from dataclasses import dataclass
from typing import Any

from isbnrename.barcode.backend import BackendCapabilityError, BarcodeBackend

logger = logging.getLogger(__name__)

DEFAULT_ROW_DIVISIONS = 100
DEFAULT_HEAD_COUNT = 5
DEFAULT_TAIL_COUNT = 5

# Bookland EAN prefixes shared by every ISBN-13.
BOOKLAND_PREFIXES = ("978", "979")


@dataclass(frozen=True)
class ScanOptions:
    """How images are sampled and scanned. Built once from the CLI."""

    row_divisions: int = DEFAULT_ROW_DIVISIONS
    head_count: int = DEFAULT_HEAD_COUNT
    tail_count: int = DEFAULT_TAIL_COUNT
    rotate: bool = True

    def __post_init__(self) -> None:
        if self.row_divisions < 1:
            object.__setattr__(self, "row_divisions", DEFAULT_ROW_DIVISIONS)


def is_bookland(text: str) -> bool:
    """Cheap ISBN check: the code starts with a Bookland prefix.

    The checksum is deliberately not verified.
    """
    return text.startswith(BOOKLAND_PREFIXES)


def band_geometry(height: int, row_divisions: int) -> list[tuple[int, int]]:
    """(top, band_height) pairs covering ``height``; a trailing partial band is dropped."""
    band_height = max(1, height // max(1, row_divisions))
    return [(top, band_height) for top in range(0, height - band_height + 1, band_height)]


class BarcodeLocator:
    """Finds an ISBN-13 barcode in one image.

    Book covers often carry two stacked barcodes (ISBN and price), so the
    image is cut into horizontal bands and each band is decoded on its own.
    If no band yields an ISBN the image is rotated 90° counter-clockwise once
    and the bands are scanned again.
    """

    def __init__(self, backend: BarcodeBackend, options: ScanOptions) -> None:
        if options.rotate and not backend.supports_rotate:
            raise BackendCapabilityError(
                "barcode backend cannot rotate images; disable rotation to continue"
            )
        self._backend = backend
        self._options = options

    def bands(self, height: int) -> list[tuple[int, int]]:
        return band_geometry(height, self._options.row_divisions)

    def locate(self, bitmap: Any) -> str | None:
        """Return the first Bookland code found, or None when the image has none.

        Raises:
            BackendCapabilityError: If the backend cannot crop and a single
                full-image decode does not find a code.
        """
        if not self._backend.supports_crop:
            text = self._backend.decode(bitmap)
            if text is not None:
                return text
            raise BackendCapabilityError("barcode backend cannot crop images")

        text = self._scan_bands(bitmap)
        if text is not None or not self._options.rotate:
            return text

        logger.debug("No barcode found upright, retrying rotated")
        return self._scan_bands(self._backend.rotate_ccw(bitmap))

    def _scan_bands(self, bitmap: Any) -> str | None:
        _width, height = self._backend.size(bitmap)
        for top, band_height in self.bands(height):
            band = self._backend.crop(bitmap, top, band_height)
            text = self._backend.decode(band)
            if text is None:
                continue
            if is_bookland(text):
                logger.debug("Found %s in band at top=%d", text, top)
                return text
            logger.debug("Skipping non-ISBN barcode %s at top=%d", text, top)
        return None
