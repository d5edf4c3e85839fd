# ABOUTME: Chooses which images in a folder to hand to the barcode locator.
# ABOUTME: Scans the first few images, then the last few, stopping at the first ISBN found.

import logging
from pathlib import Path

from isbnrename.barcode.backend import BarcodeBackend, ImageDecodeError
from isbnrename.barcode.locator import BarcodeLocator, ScanOptions

logger = logging.getLogger(__name__)


def list_files(directory: Path) -> list[Path]:
    """Non-recursive, name-ordered listing of the files in ``directory``."""
    return sorted(path for path in directory.iterdir() if not path.is_dir())


class DirectorySampler:
    """Samples a folder of scans for an ISBN barcode.

    The barcode is usually on the back cover, which is either the first or
    the last image of a scanned book. The head pass scans up to
    ``head_count`` images from the start of the listing; only when it finds
    nothing does the tail pass scan up to ``tail_count`` images from the end.
    Files that are not decodable images are skipped and do not count.
    """

    def __init__(
        self, locator: BarcodeLocator, backend: BarcodeBackend, options: ScanOptions
    ) -> None:
        self._locator = locator
        self._backend = backend
        self._options = options
        self.scanned: list[Path] = []

    def check_dir(self, directory: Path) -> str | None:
        """Return the first ISBN found in the folder, or None."""
        files = list_files(directory)
        if self._options.head_count > 0:
            isbn = self._check_files(files, self._options.head_count)
            if isbn is not None:
                return isbn
        if self._options.tail_count > 0:
            return self._check_files(list(reversed(files)), self._options.tail_count)
        return None

    def _check_files(self, files: list[Path], count: int) -> str | None:
        remaining = count
        for path in files:
            if remaining <= 0:
                break
            try:
                bitmap = self._backend.open_image(path)
            except ImageDecodeError as exc:
                logger.debug("Skipping %s: %s", path.name, exc)
                continue
            logger.info("Scan: %s", path.name)
            self.scanned.append(path)
            isbn = self._locator.locate(bitmap)
            if isbn is not None:
                return isbn
            remaining -= 1
        return None
