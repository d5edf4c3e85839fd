# ABOUTME: Image/barcode backend abstraction used by the barcode locator.
# ABOUTME: PillowBackend decodes JPEG/PNG/BMP with Pillow and reads EAN-13 symbols with pyzbar.

import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

IMAGE_FORMATS = ("JPEG", "PNG", "BMP")


class BackendCapabilityError(Exception):
    """Raised when the barcode backend lacks an operation the scan requires."""


class ImageDecodeError(Exception):
    """Raised when a file cannot be decoded as a supported image."""


@runtime_checkable
class BarcodeBackend(Protocol):
    """Protocol for the bitmap operations the locator needs.

    Bitmaps are opaque to the locator; only the backend that produced one
    knows how to measure, crop, rotate, and decode it.
    """

    @property
    def supports_crop(self) -> bool: ...

    @property
    def supports_rotate(self) -> bool: ...

    def open_image(self, path: Path) -> Any: ...

    def size(self, bitmap: Any) -> tuple[int, int]: ...

    def crop(self, bitmap: Any, top: int, height: int) -> Any: ...

    def rotate_ccw(self, bitmap: Any) -> Any: ...

    def decode(self, bitmap: Any) -> str | None: ...


class PillowBackend:
    """Barcode backend built on Pillow images and the zbar EAN-13 reader."""

    supports_crop = True
    supports_rotate = True

    def open_image(self, path: Path) -> Image.Image:
        """Decode an image file into a grayscale bitmap.

        Raises:
            ImageDecodeError: If the file is not a JPEG, PNG or BMP image, or
                cannot be read.
        """
        try:
            with Image.open(path, formats=IMAGE_FORMATS) as img:
                return img.convert("L")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise ImageDecodeError(f"{path.name}: {exc}") from exc

    def size(self, bitmap: Image.Image) -> tuple[int, int]:
        return bitmap.size

    def crop(self, bitmap: Image.Image, top: int, height: int) -> Image.Image:
        """Full-width horizontal band starting at ``top``."""
        return bitmap.crop((0, top, bitmap.width, top + height))

    def rotate_ccw(self, bitmap: Image.Image) -> Image.Image:
        return bitmap.transpose(Image.Transpose.ROTATE_90)

    def decode(self, bitmap: Image.Image) -> str | None:
        """Return the first EAN-13 payload zbar finds in the bitmap, if any."""
        # pyzbar loads the zbar shared library at import time.
        from pyzbar.pyzbar import ZBarSymbol
        from pyzbar.pyzbar import decode as zbar_decode

        for symbol in zbar_decode(bitmap, symbols=[ZBarSymbol.EAN13]):
            try:
                return symbol.data.decode("ascii")
            except UnicodeDecodeError:
                logger.debug("Ignoring non-ASCII barcode payload %r", symbol.data)
        return None
