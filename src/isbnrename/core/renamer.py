# ABOUTME: Turns a resolved BookRecord into a folder name and renames the folder.
# ABOUTME: Renders a Jinja2 template, maps forbidden filename characters, and refuses to overwrite.

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import jinja2

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = (
    "[{{ author }}] {{ title }} "
    "{% if publisher %}[{{ publisher }}]{% endif %}"
    "{% if pubdate %}[{{ pubdate }}]{% endif %}"
    "[ISBN {{ isbn }}]"
)

# Characters most filesystems reject, mapped to look-alike full-width forms.
_FORBIDDEN_CHARS = {
    '"': "”",
    "*": "＊",
    "/": "／",
    ":": "：",
    "<": "＜",
    ">": "＞",
    "?": "？",
    "\\": "￥",
    "|": "｜",
}
_FILENAME_TABLE = str.maketrans(
    {
        **{chr(code): " " for code in range(0x20)},
        "\x7f": " ",
        **_FORBIDDEN_CHARS,
    }
)

_ENVIRONMENT = jinja2.Environment(autoescape=False)


def compile_template(text: str) -> jinja2.Template:
    """Compile a rename template.

    The template sees ``title``, ``author``, ``publisher``, ``pubdate`` and
    ``isbn`` plus ``extra``, a mapping from provider name to that provider's
    decoded response (e.g. ``{% if extra.google %}``). Keys that shadow dict
    methods need subscripts: ``extra.google["items"]``.

    Raises:
        jinja2.TemplateSyntaxError: If the template does not parse.
    """
    return _ENVIRONMENT.from_string(text)


def sanitize_filename(name: str) -> str:
    """Replace characters that are invalid in file names and trim whitespace.

    Control characters become spaces; ``" * / : < > ? \\ |`` become their
    full-width counterparts. Applying it twice changes nothing.
    """
    return name.translate(_FILENAME_TABLE).strip()


def render_name(template: jinja2.Template, context: dict[str, Any]) -> str:
    """Render and sanitize a folder name. Returns "" if rendering fails."""
    try:
        rendered = template.render(**context)
    except jinja2.TemplateError as exc:
        logger.error("Cannot render folder name: %s", exc)
        return ""
    return sanitize_filename(rendered)


class RenameStatus(Enum):
    RENAMED = "renamed"
    UNCHANGED = "unchanged"
    COLLISION = "collision"
    DRY_RUN = "dry-run"
    FAILED = "failed"


@dataclass
class RenameResult:
    """Outcome of a folder rename."""

    source: Path
    target: Path | None
    status: RenameStatus
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status in (RenameStatus.RENAMED, RenameStatus.UNCHANGED, RenameStatus.DRY_RUN)


def rename_directory(path: Path, new_name: str, *, dry_run: bool = False) -> RenameResult:
    """Rename ``path`` to ``new_name`` within the same parent directory.

    An existing entry with the target name is never overwritten and no
    numeric suffix is tried; the rename is skipped and reported as a
    collision instead.

    Args:
        path: The folder to rename.
        new_name: The already-sanitized new name.
        dry_run: Report the planned rename without touching the filesystem.
    """
    source = path.resolve()
    if not new_name:
        return RenameResult(source, None, RenameStatus.FAILED, error="empty folder name")

    target = source.parent / new_name
    if new_name == source.name:
        return RenameResult(source, target, RenameStatus.UNCHANGED)
    if target.exists():
        logger.warning("Not renaming %s: %s already exists", source.name, new_name)
        return RenameResult(source, target, RenameStatus.COLLISION)
    if dry_run:
        return RenameResult(source, target, RenameStatus.DRY_RUN)

    try:
        source.rename(target)
    except OSError as exc:
        logger.error("Rename of %s failed: %s", source.name, exc)
        return RenameResult(source, target, RenameStatus.FAILED, error=str(exc))
    logger.info("Renamed %s => %s", source.name, new_name)
    return RenameResult(source, target, RenameStatus.RENAMED)
