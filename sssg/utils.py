"""Utility functions for sssg.

Key functions:
    write_atomic: Replace a file's contents in one step.
    display_path: Shorten a path for messages.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def write_atomic(path: Path, text: str) -> None:
    """Write text to ``path`` so readers never see a partial file.

    The text goes to a temporary file in the same directory, which then
    replaces the target with ``os.replace``.

    Args:
        path: Destination file.
        text: Content to write, encoded as UTF-8.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def display_path(path: Path, root: Path | None = None) -> Path:
    """Return ``path`` relative to ``root`` (default: cwd) when possible.

    Args:
        path: Path to shorten.
        root: Directory to make the path relative to.

    Returns:
        The relative path, or ``path`` unchanged if it is outside ``root``.
    """
    base = root if root is not None else Path.cwd()
    try:
        return path.relative_to(base)
    except ValueError:
        return path
