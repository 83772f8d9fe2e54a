"""Placeholder substitution for sssg.

Templates are plain text files containing ``{{name}}`` placeholders. This is
deliberately not a template language: there are no loops, conditionals or
includes, only flat name to value replacement. The engine does not care
whether the template is HTML, CSS or JavaScript.

Key functions:
- find_placeholders: List placeholder names in scan order.
- substitute: Replace every placeholder with its value.
- load_template: Read a template file from the templates directory.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path

from .errors import FileError, UnresolvedPlaceholderError

PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_.-]*)\s*\}\}")


def find_placeholders(body: str) -> list[str]:
    """Return placeholder names in the order they appear.

    Names appearing more than once are listed once per occurrence.

    Args:
        body: Template text.

    Returns:
        List of placeholder names.
    """
    return [match.group(1) for match in PLACEHOLDER_RE.finditer(body)]


def substitute(body: str, values: Mapping[str, str]) -> str:
    """Replace every placeholder in ``body`` with its value.

    All placeholders are checked before any output is produced, so a
    failure never yields partial text. Keys in ``values`` that the template
    does not use are ignored, and substituted values are not scanned again.

    Args:
        body: Template text.
        values: Placeholder name to replacement text.

    Returns:
        The template with all placeholders replaced.

    Raises:
        UnresolvedPlaceholderError: For the first placeholder, in scan
            order, that has no entry in ``values``.
    """
    for name in find_placeholders(body):
        if name not in values:
            raise UnresolvedPlaceholderError(name)
    return PLACEHOLDER_RE.sub(lambda match: values[match.group(1)], body)


def load_template(templates_dir: Path, name: str) -> str:
    """Read a template file.

    Templates are read fresh on every call.

    Args:
        templates_dir: Directory containing templates.
        name: Template file name, relative to ``templates_dir``.

    Returns:
        The template text.

    Raises:
        FileError: If the template cannot be read. ``source_path`` is the
            template path.
    """
    path = templates_dir / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileError(
            path, f"Error reading template file '{path}' ({exc})", exc
        ) from exc
