# ABOUTME: Shared pytest fixtures for isbnrename tests.
# ABOUTME: Provides a scanned-book folder with real image files and a fake barcode backend.

from pathlib import Path

import pytest
from PIL import Image

from tests.fixtures.barcode_backends import FakeBackend, FakeBitmap


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def scan_dir(tmp_path: Path) -> Path:
    """Create a folder shaped like a scanned book.

    Layout:
        scans/
            001.png     front cover
            002.jpg     page
            003.bmp     page
            004.png     back cover
            notes.txt   not an image
            extras/     sub-directory, never scanned
    """
    root = tmp_path / "scans"
    root.mkdir()
    Image.new("RGB", (40, 60), "white").save(root / "001.png")
    Image.new("RGB", (40, 60), "white").save(root / "002.jpg")
    Image.new("RGB", (40, 60), "white").save(root / "003.bmp")
    Image.new("RGB", (40, 60), "white").save(root / "004.png")
    (root / "notes.txt").write_text("not an image")
    (root / "extras").mkdir()
    return root


@pytest.fixture
def back_cover() -> FakeBitmap:
    """A 4000x3000 back cover with a price barcode above the ISBN barcode."""
    return FakeBitmap(
        width=4000,
        height=3000,
        codes=[(1200, "1920193006003"), (1500, "9784101010014")],
    )


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()
