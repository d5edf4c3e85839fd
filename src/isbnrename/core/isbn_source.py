# ABOUTME: ISBN sources that bypass barcode scanning.
# ABOUTME: Reads a 13-digit code from a check file or picks an ISBN out of the folder name.

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

_NON_DIGIT_RE = re.compile(r"\D", re.ASCII)
_NAME_ISBN_RE = re.compile(r"\d{13}|\d{9}[xX]|\d{10}", re.ASCII)


def isbn_from_check_file(path: Path) -> str | None:
    """Read an ISBN-13 from a text file.

    Everything but ASCII digits is discarded; the result is used only when
    exactly 13 digits remain. A missing or unreadable file yields None.
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Check file %s unavailable: %s", path, exc)
        return None
    digits = _NON_DIGIT_RE.sub("", text)
    if len(digits) != 13:
        logger.warning("Check file %s does not hold a 13-digit code", path)
        return None
    return digits


def isbn_from_name(name: str) -> str | None:
    """First ISBN-13, ISBN-10 with X check digit, or ISBN-10 in a folder name."""
    match = _NAME_ISBN_RE.search(name)
    return match.group(0) if match else None
